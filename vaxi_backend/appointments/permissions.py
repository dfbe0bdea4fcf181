from vaxi_backend.core.permissions import RBACPermission


class AppointmentPermission(RBACPermission):
    """RBAC für Impftermine.

    - admin: alles
    - nurse: alles
    - reception: alles
    - auditor: nur read
    """

    read_roles = {"admin", "nurse", "reception", "auditor"}
    write_roles = {"admin", "nurse", "reception"}
