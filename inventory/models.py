"""
inventory/models.py -- Domain dataclass for tracked appliances.

Pure data container with zero logic. Persistence lives in inventory/store.py;
the HTTP field names (eletronico, consumo, ...) live in api/models.py.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class Appliance:
    """An electrical appliance and its energy figures.

    cost is free-form text on purpose ("R$ 12,50/mes" is a valid value), so
    it is never parsed as a number. Every field may be None; a request that
    leaves a field out stores NULL. consumption and active are normally a
    number and a bool, but a value SQLite accepted in another shape is kept as is.

    id is None before the record is written to the database.
    """

    name: Optional[str] = None
    consumption: Optional[Union[float, str]] = None  # e.g. kWh
    active: Optional[Union[bool, int, float, str]] = None
    cost: Optional[str] = None
    description: Optional[str] = None
    id: Optional[int] = None
