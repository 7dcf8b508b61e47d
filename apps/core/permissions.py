# core/permissions.py
"""
Dashboard roles and what each of them may see.

Authentication and sessions live outside this project; callers pass the
viewer's role in. Only the presentation of derived values depends on it.
"""

ADMIN = 'admin'
TEACHER = 'teacher'
STUDENT = 'student'
PARENT = 'parent'

ROLE_CHOICES = (
    (ADMIN, 'Admin'),
    (TEACHER, 'Teacher'),
    (STUDENT, 'Student'),
    (PARENT, 'Parent'),
)

STAFF_ROLES = {ADMIN, TEACHER}

ROLE_PERMISSIONS = {
    ADMIN: {
        'admission': ['view', 'add', 'change'],
        'finance': ['view', 'add'],
        'attendance': ['view', 'add', 'change'],
        'examination': ['view', 'add', 'change'],
        'settings': ['view', 'change'],
    },
    TEACHER: {
        'attendance': ['view', 'add', 'change'],
        'examination': ['view', 'add', 'change'],
    },
    STUDENT: {
        'attendance': ['view'],
        'examination': ['view'],
    },
    PARENT: {
        'attendance': ['view'],
        'examination': ['view'],
        'finance': ['view'],
    },
}


def normalize_role(role):
    role = (role or '').strip().lower()
    return role if role in ROLE_PERMISSIONS else STUDENT


def has_permission(role, module, action='view'):
    return action in ROLE_PERMISSIONS.get(normalize_role(role), {}).get(module, [])


def can_view_rank(role, config):
    """
    Staff always see rank; students and parents only while ranking is enabled.
    """
    return normalize_role(role) in STAFF_ROLES or bool(config.enabled)
