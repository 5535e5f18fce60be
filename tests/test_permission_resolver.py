"""
Tests for the folder/document access decisions
"""
import pytest
from datetime import timedelta

from models import Role, PermissionLevel, ResourceRef
from models.base import utcnow
from services.permission_resolver import PermissionResolver

ALL_LEVELS = [PermissionLevel.READ, PermissionLevel.WRITE, PermissionLevel.ADMIN]


@pytest.fixture
def resolver(app):
    return PermissionResolver()


@pytest.fixture
def owner(make_user):
    return make_user(Role.USER, username="owner")


@pytest.fixture
def folder(make_folder, owner):
    return make_folder(owner, name="Shared")


@pytest.fixture
def document(make_document, folder, owner):
    return make_document(folder, owner)


class TestRoleOverrides:
    """SystemAdmin and Admin can access everything"""

    @pytest.mark.parametrize("role", [Role.SYSTEM_ADMIN, Role.ADMIN])
    @pytest.mark.parametrize("level", ALL_LEVELS)
    def test_admin_roles_access_any_folder(self, resolver, make_user, folder, role, level):
        user = make_user(role)
        assert resolver.can_access_folder(user.id, folder.id, level) is True

    @pytest.mark.parametrize("role", [Role.SYSTEM_ADMIN, Role.ADMIN])
    @pytest.mark.parametrize("level", ALL_LEVELS)
    def test_admin_roles_access_any_document(self, resolver, make_user, document, role, level):
        user = make_user(role)
        assert resolver.can_access_document(user.id, document.id, level) is True

    def test_admin_denied_on_missing_folder(self, resolver, admin):
        """Admin override only applies once the folder is found"""
        assert resolver.can_access_folder(admin.id, 9999, PermissionLevel.READ) is False

    def test_system_admin_granted_before_folder_lookup(self, resolver, system_admin):
        assert resolver.can_access_folder(system_admin.id, 9999, PermissionLevel.READ) is True

    def test_levels_accepted_as_strings(self, resolver, admin, folder):
        assert resolver.can_access_folder(admin.id, folder.id, "Write") is True
        assert resolver.can_access_folder(admin.id, folder.id, "write") is True

    def test_unknown_level_is_denied(self, resolver, admin, folder):
        assert resolver.can_access_folder(admin.id, folder.id, "Delete") is False


class TestOwnership:

    @pytest.mark.parametrize("level", ALL_LEVELS)
    def test_owner_has_full_folder_access(self, resolver, owner, folder, level):
        assert resolver.can_access_folder(owner.id, folder.id, level) is True

    @pytest.mark.parametrize("level", ALL_LEVELS)
    def test_owner_has_full_document_access(self, resolver, make_user, make_folder, make_document, level):
        folder_owner = make_user(Role.USER)
        doc_owner = make_user(Role.VIEWER)
        folder = make_folder(folder_owner)
        document = make_document(folder, doc_owner)
        assert resolver.can_access_document(doc_owner.id, document.id, level) is True

    def test_non_owner_without_grant_is_denied(self, resolver, make_user, folder, document):
        stranger = make_user(Role.MANAGER)
        assert resolver.can_access_folder(stranger.id, folder.id, PermissionLevel.READ) is False
        assert resolver.can_access_document(stranger.id, document.id, PermissionLevel.READ) is False


class TestSystemFolders:

    @pytest.fixture
    def root(self, make_folder, system_admin):
        return make_folder(system_admin, name="Root", is_system_folder=True)

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.EDITOR, Role.CONTRIBUTOR, Role.VIEWER, Role.USER])
    def test_any_active_user_reads_system_folder(self, resolver, make_user, root, role):
        user = make_user(role)
        assert resolver.can_access_folder(user.id, root.id, PermissionLevel.READ) is True

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.EDITOR, Role.CONTRIBUTOR])
    def test_privileged_roles_write_system_folder(self, resolver, make_user, root, role):
        user = make_user(role)
        assert resolver.can_access_folder(user.id, root.id, PermissionLevel.WRITE) is True

    @pytest.mark.parametrize("role", [Role.VIEWER, Role.USER])
    def test_other_roles_cannot_write_system_folder(self, resolver, make_user, root, role):
        user = make_user(role)
        assert resolver.can_access_folder(user.id, root.id, PermissionLevel.WRITE) is False

    def test_admin_level_on_system_folder_needs_grant(self, resolver, make_user, make_grant, root):
        editor = make_user(Role.EDITOR)
        assert resolver.can_access_folder(editor.id, root.id, PermissionLevel.ADMIN) is False

        make_grant(editor, folder=root, level=PermissionLevel.ADMIN)
        assert resolver.can_access_folder(editor.id, root.id, PermissionLevel.ADMIN) is True

    def test_viewer_on_root_scenario(self, resolver, make_user, root):
        """Viewer V on the system root R owned by SystemAdmin S"""
        viewer = make_user(Role.VIEWER)
        assert resolver.can_access_folder(viewer.id, root.id, "Read") is True
        assert resolver.can_access_folder(viewer.id, root.id, "Write") is False

    def test_unknown_role_reads_but_cannot_write(self, resolver, make_user, root):
        user = make_user("Auditor")
        assert resolver.can_access_folder(user.id, root.id, PermissionLevel.READ) is True
        assert resolver.can_access_folder(user.id, root.id, PermissionLevel.WRITE) is False


class TestExplicitGrants:

    @pytest.mark.parametrize("granted, required, expected", [
        (PermissionLevel.READ, PermissionLevel.READ, True),
        (PermissionLevel.READ, PermissionLevel.WRITE, False),
        (PermissionLevel.READ, PermissionLevel.ADMIN, False),
        (PermissionLevel.WRITE, PermissionLevel.READ, True),
        (PermissionLevel.WRITE, PermissionLevel.WRITE, True),
        (PermissionLevel.WRITE, PermissionLevel.ADMIN, False),
        (PermissionLevel.ADMIN, PermissionLevel.READ, True),
        (PermissionLevel.ADMIN, PermissionLevel.WRITE, True),
        (PermissionLevel.ADMIN, PermissionLevel.ADMIN, True),
    ])
    def test_folder_grant_level_ordering(self, resolver, make_user, make_grant, folder,
                                         granted, required, expected):
        user = make_user(Role.USER)
        make_grant(user, folder=folder, level=granted)
        assert resolver.can_access_folder(user.id, folder.id, required) is expected

    @pytest.mark.parametrize("granted, required, expected", [
        (PermissionLevel.READ, PermissionLevel.WRITE, False),
        (PermissionLevel.WRITE, PermissionLevel.WRITE, True),
        (PermissionLevel.WRITE, PermissionLevel.ADMIN, False),
        (PermissionLevel.ADMIN, PermissionLevel.ADMIN, True),
    ])
    def test_document_grant_level_ordering(self, resolver, make_user, make_grant, document,
                                           granted, required, expected):
        user = make_user(Role.USER)
        make_grant(user, document=document, level=granted)
        assert resolver.can_access_document(user.id, document.id, required) is expected

    def test_read_grant_scenario(self, resolver, make_user, make_folder, make_grant):
        """User U with a Read grant on folder F owned by admin A"""
        admin_a = make_user(Role.ADMIN)
        user_u = make_user(Role.USER)
        folder_f = make_folder(admin_a, name="F")
        make_grant(user_u, folder=folder_f, level=PermissionLevel.READ)

        assert resolver.can_access_folder(user_u.id, folder_f.id, "Read") is True
        assert resolver.can_access_folder(user_u.id, folder_f.id, "Write") is False

    def test_grant_on_other_folder_does_not_leak(self, resolver, make_user, make_folder, make_grant, owner, folder):
        user = make_user(Role.USER)
        other = make_folder(owner, name="Other")
        make_grant(user, folder=other, level=PermissionLevel.ADMIN)
        assert resolver.can_access_folder(user.id, folder.id, PermissionLevel.READ) is False

    def test_folder_grant_is_not_inherited_by_subfolders(self, resolver, make_user, make_folder, make_grant, owner, folder):
        user = make_user(Role.USER)
        child = make_folder(owner, parent=folder, name="Child")
        make_grant(user, folder=folder, level=PermissionLevel.ADMIN)
        assert resolver.can_access_folder(user.id, child.id, PermissionLevel.READ) is False

    def test_expired_grant_is_ignored(self, resolver, make_user, make_grant, folder):
        user = make_user(Role.USER)
        make_grant(user, folder=folder, level=PermissionLevel.ADMIN,
                   expires_at=utcnow() - timedelta(hours=1))
        assert resolver.can_access_folder(user.id, folder.id, PermissionLevel.READ) is False

    def test_grant_with_future_expiry_applies(self, resolver, make_user, make_grant, folder):
        user = make_user(Role.USER)
        make_grant(user, folder=folder, level=PermissionLevel.WRITE,
                   expires_at=utcnow() + timedelta(days=1))
        assert resolver.can_access_folder(user.id, folder.id, PermissionLevel.WRITE) is True


class TestDocumentInheritance:

    def test_folder_read_grant_gives_document_read(self, resolver, make_user, make_grant, folder, document):
        user = make_user(Role.USER)
        make_grant(user, folder=folder, level=PermissionLevel.READ)

        assert resolver.can_access_document(user.id, document.id, PermissionLevel.READ) is True
        assert resolver.can_access_document(user.id, document.id, PermissionLevel.WRITE) is False

    def test_document_grant_complements_folder_grant(self, resolver, make_user, make_grant, folder, document):
        user = make_user(Role.USER)
        make_grant(user, folder=folder, level=PermissionLevel.READ)
        make_grant(user, document=document, level=PermissionLevel.WRITE)

        assert resolver.can_access_document(user.id, document.id, PermissionLevel.WRITE) is True
        assert resolver.can_access_folder(user.id, folder.id, PermissionLevel.WRITE) is False

    def test_system_folder_defaults_reach_documents(self, resolver, make_user, make_folder, make_document, system_admin):
        root = make_folder(system_admin, name="Root", is_system_folder=True)
        document = make_document(root, system_admin)
        contributor = make_user(Role.CONTRIBUTOR)
        viewer = make_user(Role.VIEWER)

        assert resolver.can_access_document(viewer.id, document.id, PermissionLevel.READ) is True
        assert resolver.can_access_document(viewer.id, document.id, PermissionLevel.WRITE) is False
        assert resolver.can_access_document(contributor.id, document.id, PermissionLevel.WRITE) is True

    def test_folder_owner_reaches_documents_of_others(self, resolver, make_user, make_document, owner, folder):
        author = make_user(Role.EDITOR)
        document = make_document(folder, author)
        assert resolver.can_access_document(owner.id, document.id, PermissionLevel.ADMIN) is True


class TestNotFoundAndInactive:

    def test_missing_folder_is_denied_to_everyone_but_system_admin(self, resolver, owner):
        assert resolver.can_access_folder(owner.id, 4242, PermissionLevel.READ) is False

    def test_missing_document_is_denied(self, resolver, owner):
        assert resolver.can_access_document(owner.id, 4242, PermissionLevel.READ) is False

    def test_unknown_user_is_denied(self, resolver, make_folder, system_admin):
        root = make_folder(system_admin, name="Root", is_system_folder=True)
        assert resolver.can_access_folder(31337, root.id, PermissionLevel.READ) is False

    def test_inactive_user_is_denied_even_as_owner(self, resolver, make_user, make_folder):
        user = make_user(Role.SYSTEM_ADMIN, is_active=False)
        folder = make_folder(user)
        assert resolver.can_access_folder(user.id, folder.id, PermissionLevel.READ) is False

    def test_soft_deleted_user_is_denied(self, resolver, db_session, owner, folder):
        owner.soft_delete("admin")
        db_session.commit()
        assert resolver.can_access_folder(owner.id, folder.id, PermissionLevel.READ) is False

    def test_soft_deleted_folder_is_denied_to_owner(self, resolver, db_session, owner, folder):
        folder.soft_delete("owner")
        db_session.commit()
        assert resolver.can_access_folder(owner.id, folder.id, PermissionLevel.READ) is False

    def test_soft_deleted_document_is_denied(self, resolver, db_session, owner, document):
        document.soft_delete("owner")
        db_session.commit()
        assert resolver.can_access_document(owner.id, document.id, PermissionLevel.READ) is False


class TestEffectiveLevel:

    def test_highest_level_is_reported(self, resolver, make_user, make_grant, folder, document):
        user = make_user(Role.USER)
        assert resolver.effective_level(user.id, ResourceRef.folder(folder.id)) is None

        make_grant(user, folder=folder, level=PermissionLevel.WRITE)
        assert resolver.effective_level(user.id, ResourceRef.folder(folder.id)) is PermissionLevel.WRITE
        assert resolver.effective_level(user.id, ResourceRef.document(document.id)) is PermissionLevel.WRITE

    def test_owner_effective_level_is_admin(self, resolver, owner, folder):
        assert resolver.effective_level(owner.id, ResourceRef.folder(folder.id)) is PermissionLevel.ADMIN
