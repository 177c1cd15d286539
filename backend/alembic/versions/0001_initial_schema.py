"""initial schema: dictionaries, providers, buildings

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geography
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _dictionary_table(name: str, code_length: int, parent: tuple = None) -> None:
    columns = [
        sa.Column('code', sa.String(code_length), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
    ]
    if parent:
        column, target, length = parent
        columns.append(
            sa.Column(column, sa.String(length), sa.ForeignKey(f'{target}.code', ondelete='RESTRICT'), nullable=False)
        )
    op.create_table(name, *columns)
    if parent:
        op.create_index(f'ix_{name}_{parent[0]}', name, [parent[0]])


def upgrade() -> None:
    is_postgres = op.get_bind().dialect.name == 'postgresql'
    if is_postgres:
        op.execute('CREATE EXTENSION IF NOT EXISTS postgis')

    _dictionary_table('regions', 2)
    _dictionary_table('districts', 4, ('region_code', 'regions', 2))
    _dictionary_table('communities', 7, ('district_code', 'districts', 4))
    _dictionary_table('cities', 7, ('community_code', 'communities', 7))
    _dictionary_table('city_subdivisions', 7, ('city_code', 'cities', 7))
    _dictionary_table('streets', 20)

    op.create_table(
        'providers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('technology', sa.String(100), nullable=False),
        sa.Column('bandwidth', sa.Integer(), nullable=False),
    )

    op.create_table(
        'buildings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('region_code', sa.String(2), sa.ForeignKey('regions.code', ondelete='RESTRICT'), nullable=False),
        sa.Column('district_code', sa.String(4), sa.ForeignKey('districts.code', ondelete='RESTRICT'), nullable=False),
        sa.Column('community_code', sa.String(7), sa.ForeignKey('communities.code', ondelete='RESTRICT'), nullable=False),
        sa.Column('city_code', sa.String(7), sa.ForeignKey('cities.code', ondelete='RESTRICT'), nullable=False),
        sa.Column('city_subdivision_code', sa.String(7), sa.ForeignKey('city_subdivisions.code', ondelete='RESTRICT'), nullable=True),
        sa.Column('street_code', sa.String(20), sa.ForeignKey('streets.code', ondelete='RESTRICT'), nullable=True),
        sa.Column('region_name', sa.String(100), nullable=False),
        sa.Column('district_name', sa.String(100), nullable=False),
        sa.Column('community_name', sa.String(100), nullable=False),
        sa.Column('city_name', sa.String(100), nullable=False),
        sa.Column('city_subdivision_name', sa.String(100), nullable=True),
        sa.Column('street_name', sa.String(100), nullable=True),
        sa.Column('building_number', sa.String(20), nullable=False),
        sa.Column('post_code', sa.String(6), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('provider_id', sa.Integer(), sa.ForeignKey('providers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_by', postgresql.UUID(as_uuid=True), nullable=False),
    )
    for column in ('region_code', 'district_code', 'community_code', 'city_code', 'provider_id', 'status'):
        op.create_index(f'ix_buildings_{column}', 'buildings', [column])

    # Missing optional codes collapse to '' so they compare equal
    op.create_index(
        'uq_buildings_active_address',
        'buildings',
        [
            'region_code',
            'district_code',
            'community_code',
            'city_code',
            sa.text("coalesce(city_subdivision_code, '')"),
            sa.text("coalesce(street_code, '')"),
            'building_number',
        ],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    if is_postgres:
        op.add_column(
            'buildings',
            sa.Column(
                'location',
                Geography('POINT', srid=4326, spatial_index=False),
                sa.Computed('ST_SetSRID(ST_MakePoint(longitude, latitude), 4326)::geography', persisted=True),
            ),
        )
        op.create_index('ix_buildings_location', 'buildings', ['location'], postgresql_using='gist')


def downgrade() -> None:
    op.drop_table('buildings')
    op.drop_table('providers')
    for name in ('streets', 'city_subdivisions', 'cities', 'communities', 'districts', 'regions'):
        op.drop_table(name)
