from app.config.database import SessionLocal, Base, engine
from app.features.access.roles import RoleName
from app.models.role import Role
from app.models.permission import Permission, RolePermission
from app.models.user import User
from app.models.task import Task  # noqa: F401  User.tasks needs the mapper
from app.utils.security import get_password_hash

ROLES = [
    {"id": "d290f1ee-6c54-4b01-90e6-d701748f0851", "name": RoleName.SUPER_ADMIN.value, "description": "Super admin with all permissions"},
    {"id": "e390f1ee-6c54-4b01-90e6-d701748f0852", "name": RoleName.ADMIN.value, "description": "User and task management"},
    {"id": "f490f1ee-6c54-4b01-90e6-d701748f0853", "name": RoleName.MANAGER.value, "description": "Task management"},
    {"id": "a590f1ee-6c54-4b01-90e6-d701748f0854", "name": RoleName.EMPLOYEE.value, "description": "Works on assigned tasks"},
]

PERMISSIONS = [
    {"id": "a1b2c3d4-e5f6-4890-abcd-ef1234567890", "name": "user.create", "description": "Create new users"},
    {"id": "b2c3d4e5-f6a7-4901-bcde-f23456789012", "name": "user.read", "description": "Read user information"},
    {"id": "c3d4e5f6-a7b8-4012-8def-345678901234", "name": "user.update", "description": "Update user information"},
    {"id": "d4e5f6a7-b8c9-4123-9efa-456789012345", "name": "user.delete", "description": "Delete users"},
    {"id": "e5f6a7b8-c9d0-4234-afab-567890123456", "name": "task.create", "description": "Create new tasks"},
    {"id": "f6a7b8c9-d0e1-4345-babc-678901234567", "name": "task.read", "description": "Read task information"},
    {"id": "a7b8c9d0-e1f2-4456-8bcd-789012345678", "name": "task.update", "description": "Update task information"},
    {"id": "b8c9d0e1-f2a3-4567-9cde-890123456789", "name": "task.delete", "description": "Delete tasks"},
    {"id": "c9d0e1f2-a3b4-4678-adef-901234567890", "name": "role.manage", "description": "Manage roles and permissions"},
    {"id": "d0e1f2a3-b4c5-4789-befa-012345678901", "name": "system.admin", "description": "Full system administration"},
]

ROLE_PERMISSIONS = {
    RoleName.SUPER_ADMIN.value: [p["name"] for p in PERMISSIONS],
    RoleName.ADMIN.value: [
        "user.create", "user.read", "user.update", "user.delete",
        "task.create", "task.read", "task.update", "task.delete",
    ],
    RoleName.MANAGER.value: ["task.create", "task.read", "task.update"],
    RoleName.EMPLOYEE.value: ["task.read", "task.update"],
}

SUPER_ADMIN = {
    "id": "a190f1ee-6c54-4b01-90e6-d701748f0850",
    "name": "Super Admin",
    "email": "superadmin@example.com",
    "password": "SuperAdmin@123",
}

def seed_roles(db):
    roles = {}
    for data in ROLES:
        role = db.query(Role).filter(Role.name == data["name"]).first()
        if not role:
            print(f"Creating role: {data['name']}")
            role = Role(**data)
            db.add(role)
        roles[role.name] = role
    db.flush()
    return roles

def seed_permissions(db):
    permissions = {}
    for data in PERMISSIONS:
        permission = db.query(Permission).filter(Permission.name == data["name"]).first()
        if not permission:
            print(f"Creating permission: {data['name']}")
            permission = Permission(**data)
            db.add(permission)
        permissions[permission.name] = permission
    db.flush()
    return permissions

def seed_role_permissions(db, roles, permissions):
    for role_name, permission_names in ROLE_PERMISSIONS.items():
        role = roles[role_name]
        for permission_name in permission_names:
            permission = permissions[permission_name]
            exists = db.query(RolePermission).filter(
                RolePermission.role_id == role.id,
                RolePermission.permission_id == permission.id
            ).first()
            if not exists:
                db.add(RolePermission(role_id=role.id, permission_id=permission.id))

def seed_super_admin(db, roles):
    user = db.query(User).filter(User.email == SUPER_ADMIN["email"]).first()
    if user:
        print("Super admin already exists")
        return
    print(f"Creating super admin: {SUPER_ADMIN['email']}")
    db.add(User(
        id=SUPER_ADMIN["id"],
        name=SUPER_ADMIN["name"],
        email=SUPER_ADMIN["email"],
        hashed_password=get_password_hash(SUPER_ADMIN["password"]),
        role_id=roles[RoleName.SUPER_ADMIN.value].id,
    ))

def seed(db):
    roles = seed_roles(db)
    permissions = seed_permissions(db)
    seed_role_permissions(db, roles, permissions)
    seed_super_admin(db, roles)
    db.commit()

if __name__ == "__main__":
    # Ensure tables exist
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed(db)
        print("Seeding completed successfully!")
    except Exception as e:
        db.rollback()
        print(f"Error seeding database: {e}")
        raise
    finally:
        db.close()
