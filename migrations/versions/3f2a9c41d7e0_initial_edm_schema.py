"""initial_edm_schema

Revision ID: 3f2a9c41d7e0
Revises:
Create Date: 2025-11-26 09:12:44.120551

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2a9c41d7e0'
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.Column('modified_at', sa.DateTime(), nullable=True),
        sa.Column('modified_by', sa.String(length=100), nullable=True),
    ]


def _soft_delete_columns():
    return _audit_columns() + [
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', sa.String(length=100), nullable=True),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False, unique=True),
        sa.Column('email', sa.String(length=120), nullable=True, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_soft_delete_columns(),
    )
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'folders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('folders.id'), nullable=True),
        sa.Column('path', sa.String(length=1000), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('is_system_folder', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_soft_delete_columns(),
    )
    op.create_index('idx_folders_parent', 'folders', ['parent_id'])
    op.create_index('idx_folders_owner', 'folders', ['owner_id'])
    op.create_index('idx_folders_path', 'folders', ['path'])

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('folder_id', sa.Integer(), sa.ForeignKey('folders.id'), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=False),
        sa.Column('file_extension', sa.String(length=20), nullable=False),
        sa.Column('current_version', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_soft_delete_columns(),
    )
    op.create_index('idx_documents_folder', 'documents', ['folder_id'])
    op.create_index('idx_documents_owner', 'documents', ['owner_id'])
    op.create_index('idx_documents_status', 'documents', ['status'])

    op.create_table(
        'document_versions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('document_id', sa.Integer(), sa.ForeignKey('documents.id'), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=1000), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=False),
        sa.Column('version_comment', sa.Text(), nullable=True),
        sa.Column('is_current_version', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.UniqueConstraint('document_id', 'version_number', name='uq_document_versions_number'),
    )
    op.create_index('idx_document_versions_document', 'document_versions', ['document_id'])

    # Une seule permission par couple (utilisateur, ressource)
    op.create_table(
        'permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('folder_id', sa.Integer(), sa.ForeignKey('folders.id'), nullable=True),
        sa.Column('document_id', sa.Integer(), sa.ForeignKey('documents.id'), nullable=True),
        sa.Column('permission_type', sa.String(length=20), nullable=False),
        sa.Column('is_inherited', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('granted_by', sa.String(length=100), nullable=False),
        sa.Column('granted_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint('user_id', 'folder_id', name='uq_permissions_user_folder'),
        sa.UniqueConstraint('user_id', 'document_id', name='uq_permissions_user_document'),
        sa.CheckConstraint('(folder_id IS NULL) <> (document_id IS NULL)',
                           name='ck_permissions_single_resource'),
    )
    op.create_index('idx_permissions_user', 'permissions', ['user_id'])
    op.create_index('idx_permissions_folder', 'permissions', ['folder_id'])
    op.create_index('idx_permissions_document', 'permissions', ['document_id'])

    op.create_table(
        'access_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('target', sa.String(length=255), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
    )


def downgrade():
    # Drop tables in reverse order
    op.drop_table('access_logs')

    op.drop_index('idx_permissions_document', 'permissions')
    op.drop_index('idx_permissions_folder', 'permissions')
    op.drop_index('idx_permissions_user', 'permissions')
    op.drop_table('permissions')

    op.drop_index('idx_document_versions_document', 'document_versions')
    op.drop_table('document_versions')

    op.drop_index('idx_documents_status', 'documents')
    op.drop_index('idx_documents_owner', 'documents')
    op.drop_index('idx_documents_folder', 'documents')
    op.drop_table('documents')

    op.drop_index('idx_folders_path', 'folders')
    op.drop_index('idx_folders_owner', 'folders')
    op.drop_index('idx_folders_parent', 'folders')
    op.drop_table('folders')

    op.drop_index('ix_users_role', 'users')
    op.drop_table('users')
