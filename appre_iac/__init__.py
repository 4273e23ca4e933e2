"""
Pulumi infrastructure-as-code for the Appre platform.

This package derives every physical resource name, tag set, access policy
and retention setting from one (app identity, environment) pair:
- utils: naming, tags, environment-scoped policies, lifecycle decisions
- stacks: per-service deployment plans (authentication, notifications)
- components: Pulumi component resources provisioning those plans
- runtime: base-name resolution for deployed functions
"""
