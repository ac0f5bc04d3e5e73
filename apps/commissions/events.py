"""
Commission Domain Events

Published after commit whenever commission configuration changes.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from shared.domain.base import DomainEvent


@dataclass
class CommissionConfigurationChanged(DomainEvent):
    """
    Event: a Commission or CommissionSettings row was created, updated,
    toggled or deleted

    property_type_ids lists every type whose resolved rates may differ;
    affects_global is set for CommissionSettings changes.
    """
    action: str = ''
    property_type_ids: Tuple[Any, ...] = field(default_factory=tuple)
    affects_global: bool = False
    actor_id: Optional[Any] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'action': self.action,
            'property_type_ids': [str(type_id) for type_id in self.property_type_ids],
            'affects_global': self.affects_global,
        })
        return data
