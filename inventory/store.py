"""
inventory/store.py -- SQLAlchemy-backed persistence layer for appliances.

Uses SQLAlchemy Core (not ORM) so the dataclass in inventory/models.py remains
the authoritative domain representation.

Pattern: Repository + Data Mapper. ApplianceStore is the repository; the
_row_to_appliance / _appliance_values functions are the mappers. Route
handlers never touch SQL directly.

Every method is a single statement that commits on its own, so no explicit
transaction or lock is needed. SQLAlchemy failures come out as StoreError.

Usage:
    store = ApplianceStore(engine)
    created = store.create(Appliance(name="Geladeira", consumption=35.5, active=True))
    store.update(created.id, Appliance(name="Geladeira", consumption=30.0, active=False))
    store.delete(created.id)

Layer rule: no imports from api/ or auth/.
"""

from dataclasses import replace
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, Table, Text, select
from sqlalchemy.engine import Engine
from sqlalchemy.types import UserDefinedType

from core.database import store_errors
from inventory.models import Appliance

# ---------------------------------------------------------------------------
# Schema
#
# Table and column names match the database file the service has always
# written. The plain INTEGER PRIMARY KEY (no AUTOINCREMENT) keeps SQLite rowid
# semantics for id assignment.
# ---------------------------------------------------------------------------


class _Affinity(UserDefinedType):
    """A declared SQLite column type with no Python-side conversion.

    Float and Boolean reject "muito" or "sim" before SQLite sees them. Here the
    value is bound as-is and the column affinity decides what is kept: "35.5"
    becomes REAL 35.5, "muito" stays TEXT.
    """

    cache_ok = True

    def __init__(self, ddl: str) -> None:
        self.ddl = ddl

    def get_col_spec(self, **kw) -> str:
        return self.ddl


metadata = MetaData()

_appliances = Table(
    "eletronicos",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("eletronico", Text),
    Column("consumo", _Affinity("REAL")),
    Column("status", _Affinity("BOOLEAN")),
    Column("gasto", Text),  # free-form, never numeric
    Column("descricao", Text),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ApplianceStore:
    """Repository for Appliance records."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        with store_errors("create the appliances table"):
            metadata.create_all(self.engine)

    def create(self, appliance: Appliance) -> Appliance:
        """Insert a new appliance and return it with its assigned id.

        Field values are stored as given; the store does no type checking.
        """
        with store_errors("create the appliance"):
            with self.engine.connect() as conn:
                result = conn.execute(_appliances.insert().values(**_appliance_values(appliance)))
                conn.commit()
                new_id = result.inserted_primary_key[0]
        return replace(appliance, id=new_id)

    def list_all(self) -> list[Appliance]:
        """Return every appliance in storage order (insertion order in practice)."""
        with store_errors("list the appliances"):
            with self.engine.connect() as conn:
                rows = conn.execute(_appliances.select()).fetchall()
        return [_row_to_appliance(r) for r in rows]

    def get(self, appliance_id: int) -> Optional[Appliance]:
        """Look up an appliance by id. Returns None if not found."""
        with store_errors("read the appliance"):
            with self.engine.connect() as conn:
                row = conn.execute(_appliances.select().where(_appliances.c.id == appliance_id)).fetchone()
        return _row_to_appliance(row) if row is not None else None

    def update(self, appliance_id: int, appliance: Appliance) -> bool:
        """Replace all five mutable fields of an existing appliance.

        This is a full replace: a None field overwrites the stored value with
        NULL. appliance.id is ignored; the row is chosen by appliance_id.

        Returns True if a row was updated, False if appliance_id was not found.
        """
        with store_errors("update the appliance"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _appliances.update()
                    .where(_appliances.c.id == appliance_id)
                    .values(**_appliance_values(appliance))
                )
                conn.commit()
        return result.rowcount > 0

    def delete(self, appliance_id: int) -> bool:
        """Permanently delete an appliance. Returns True if deleted, False if not found."""
        with store_errors("delete the appliance"):
            with self.engine.connect() as conn:
                result = conn.execute(_appliances.delete().where(_appliances.c.id == appliance_id))
                conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the appliances table can be queried."""
        with store_errors("reach the appliances table"):
            with self.engine.connect() as conn:
                conn.execute(select(_appliances.c.id).limit(1)).fetchall()
        return True


# ---------------------------------------------------------------------------
# Mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _appliance_values(appliance: Appliance) -> dict:
    return {
        "eletronico": appliance.name,
        "consumo": appliance.consumption,
        "status": appliance.active,
        "gasto": appliance.cost,
        "descricao": appliance.description,
    }


def _row_to_appliance(row) -> Appliance:
    # SQLite keeps booleans as 0/1; anything else in the column is returned as stored.
    active = row.status
    if isinstance(active, int) and active in (0, 1):
        active = bool(active)
    return Appliance(
        id=row.id,
        name=row.eletronico,
        consumption=row.consumo,
        active=active,
        cost=row.gasto,
        description=row.descricao,
    )
