"""Shared constants for Multi AD Login."""

# Roles
ROLE_VIEWER = 'viewer'
ROLE_MEMBER = 'member'
ROLE_ADMIN = 'admin'

ALL_ROLES = [ROLE_VIEWER, ROLE_MEMBER, ROLE_ADMIN]

ROLE_HIERARCHY = {
    ROLE_VIEWER: 0,
    ROLE_MEMBER: 10,
    ROLE_ADMIN: 100,
}

# Audit categories
AUDIT_CATEGORY_AUTH = 'auth'
AUDIT_CATEGORY_ADMIN = 'admin'

# Audit actions
AUDIT_ACTION_LOGIN = 'auth.login'
AUDIT_ACTION_PROFILE_ADD = 'profile.add'
AUDIT_ACTION_PROFILE_UPDATE = 'profile.update'
AUDIT_ACTION_PROFILE_DELETE = 'profile.delete'

# Directory defaults
DEFAULT_LDAP_PORT = 389
DEFAULT_NETWORK_TIMEOUT = 5
LIST_SEPARATOR = ';'
