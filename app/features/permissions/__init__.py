"""
Platform access control feature module.

Super admin detection, system role based permissions and role assignment
management for platform administrators.
"""
