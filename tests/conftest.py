"""
Pytest configuration and fixtures for backend tests
"""
import itertools
import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from config import TestConfig
from extensions import db
from models import User, Role, Folder, Document, Permission, PermissionLevel


@pytest.fixture
def app():
    """Create application for testing (fresh in-memory database per test)"""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def db_session(app):
    return db.session


@pytest.fixture
def make_user(db_session):
    """Factory creating committed users"""
    counter = itertools.count(1)

    def _make_user(role=Role.USER, username=None, is_active=True, password='Test@123'):
        username = username or f"user{next(counter)}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            first_name="Test",
            last_name="User",
            role=role.value if isinstance(role, Role) else role,
            is_active=is_active,
        )
        user.set_password(password)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_folder(db_session):
    """Factory creating committed folders without going through FolderService"""
    counter = itertools.count(1)

    def _make_folder(owner, parent=None, name=None, is_system_folder=False):
        name = name or f"Folder {next(counter)}"
        path, level = Folder.build_path(name, parent)
        folder = Folder(
            name=name,
            parent_id=parent.id if parent else None,
            path=path,
            level=level,
            is_system_folder=is_system_folder,
            owner_id=owner.id,
            created_by="System",
        )
        db_session.add(folder)
        db_session.commit()
        return folder

    return _make_folder


@pytest.fixture
def make_document(db_session):
    def _make_document(folder, owner, title="Test Document"):
        document = Document(
            title=title,
            folder_id=folder.id,
            file_name="test.pdf",
            file_size=1024,
            mime_type="application/pdf",
            file_extension=".pdf",
            owner_id=owner.id,
            created_by="System",
        )
        db_session.add(document)
        db_session.commit()
        return document

    return _make_document


@pytest.fixture
def make_grant(db_session):
    """Insert a grant row directly"""
    def _make_grant(user, folder=None, document=None, level=PermissionLevel.READ, expires_at=None):
        grant = Permission(
            user_id=user.id,
            folder_id=folder.id if folder else None,
            document_id=document.id if document else None,
            permission_type=level.value,
            granted_by="System",
            expires_at=expires_at,
            created_by="System",
        )
        db_session.add(grant)
        db_session.commit()
        return grant

    return _make_grant


@pytest.fixture
def system_admin(make_user):
    return make_user(Role.SYSTEM_ADMIN, username="sysadmin")


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, username="orgadmin")


@pytest.fixture
def auth_headers(app):
    """Build bearer headers for a user, as issued by /auth/login"""
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers
