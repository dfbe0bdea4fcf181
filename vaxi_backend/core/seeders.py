import random

from django.contrib.auth import get_user_model
from django.db import transaction

from .models import Role, AuditLog

User = get_user_model()

RANDOM_SEED = 42


def seed_core(flush: bool = False) -> dict:
    """
    Seedet:
    - Rollen (admin, nurse, reception, auditor)
    - Operatoren (Impfpersonal, Empfang, Audit)

    Wenn flush=True:
        - Löscht AuditLogs
        - Löscht NICHT Superuser
        - Löscht nur Benutzer, deren E-Mail auf '@seed.local' endet
    """
    random.seed(RANDOM_SEED)

    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            AuditLog.objects.all().delete()
            User.objects.filter(is_superuser=False, email__endswith="@seed.local").delete()

        roles = _seed_roles()
        stats["core_roles"] = len(roles)

        users = _seed_users(roles)
        stats["core_users"] = len(users)

    return stats


def _seed_roles() -> list[Role]:
    role_definitions = [
        ("admin", "Admin"),
        ("nurse", "Impfpersonal"),
        ("reception", "Empfang"),
        ("auditor", "Audit"),
    ]

    roles: list[Role] = []
    for name, label in role_definitions:
        role, _created = Role.objects.get_or_create(name=name, defaults={"label": label})
        roles.append(role)
    return roles


def _seed_users(roles: list[Role]) -> list[User]:
    users: list[User] = []

    def get_role(name: str) -> Role | None:
        return next((r for r in roles if r.name == name), None)

    # 1. Superuser (falls noch nicht vorhanden)
    if not User.objects.filter(is_superuser=True).exists():
        su = User.objects.create_superuser(
            username="admin",
            email="admin@vaxi.local",
            password="admin",
        )
        su.role = get_role("admin")
        su.save()
        users.append(su)

    operators = [
        ("vacunador1", "Lucia", "Ramos", "nurse"),
        ("vacunador2", "Martin", "Acosta", "nurse"),
        ("vacunador3", "Paula", "Ibarra", "nurse"),
        ("empfang1", "Sophie", "Hartmann", "reception"),
        ("audit1", "Klara", "Vogel", "auditor"),
    ]
    for username, first_name, last_name, role_name in operators:
        user = User.objects.filter(username=username).first()
        if user is None:
            user = User.objects.create_user(
                username=username,
                email=f"{username}@seed.local",
                password="test1234",
                first_name=first_name,
                last_name=last_name,
            )
        user.role = get_role(role_name)
        if role_name == "nurse":
            user.license_number = f"MP-{random.randint(10000, 99999)}"
        user.save()
        users.append(user)

    return users
