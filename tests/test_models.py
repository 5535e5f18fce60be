"""
Tests for the role and permission level value types
"""
import pytest

from models import Folder, PermissionLevel, ResourceKind, ResourceRef, Role


class TestPermissionLevel:

    def test_ordering(self):
        assert PermissionLevel.READ.rank < PermissionLevel.WRITE.rank < PermissionLevel.ADMIN.rank
        assert PermissionLevel.descending() == [PermissionLevel.ADMIN, PermissionLevel.WRITE, PermissionLevel.READ]

    def test_satisfies(self):
        assert PermissionLevel.ADMIN.satisfies(PermissionLevel.READ)
        assert PermissionLevel.WRITE.satisfies(PermissionLevel.WRITE)
        assert not PermissionLevel.READ.satisfies(PermissionLevel.WRITE)

    @pytest.mark.parametrize("value, expected", [
        ("Read", PermissionLevel.READ),
        (" write ", PermissionLevel.WRITE),
        ("ADMIN", PermissionLevel.ADMIN),
        (PermissionLevel.READ, PermissionLevel.READ),
        ("Owner", None),
        ("", None),
        (None, None),
        (3, None),
    ])
    def test_parse(self, value, expected):
        assert PermissionLevel.parse(value) is expected


class TestRole:

    def test_parse_known_and_unknown(self):
        assert Role.parse("systemadmin") is Role.SYSTEM_ADMIN
        assert Role.parse("Contributor") is Role.CONTRIBUTOR
        assert Role.parse("Auditor") is None
        assert Role.parse(None) is None

    def test_role_sets(self):
        assert {r for r in Role if r.is_org_admin} == {Role.SYSTEM_ADMIN, Role.ADMIN}
        assert not Role.VIEWER.can_write_system_folders
        assert not Role.USER.can_write_system_folders
        assert Role.CONTRIBUTOR.can_write_system_folders


class TestResourceRef:

    def test_folder_reference(self):
        ref = ResourceRef.folder(4)
        assert ref.kind is ResourceKind.FOLDER
        assert (ref.folder_id, ref.document_id) == (4, None)
        assert str(ref) == "folder:4"

    def test_document_reference(self):
        ref = ResourceRef.document(8)
        assert not ref.is_folder
        assert (ref.folder_id, ref.document_id) == (None, 8)
        assert ref == ResourceRef.document(8)
        assert ref != ResourceRef.folder(8)


class TestFolderPath:

    def test_build_path(self):
        root = Folder(name="Root", path="/Root/", level=0)
        assert Folder.build_path("Root") == ("/Root/", 0)
        assert Folder.build_path("Users", root) == ("/Root/Users/", 1)
