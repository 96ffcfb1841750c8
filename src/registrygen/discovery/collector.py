"""
Entity collector.

Validates that each marked declaration of a round is class-like and reduces
it to its fully-qualified identity.
"""

import logging
from collections.abc import Iterable

from registrygen.config.models import Declaration, DeclarationKind, MarkedEntity
from registrygen.errors import KindMismatchError

logger = logging.getLogger(__name__)


class EntityCollector:
    """Turns marked declarations into marked entities."""

    def __init__(self, accepted_kinds: Iterable[DeclarationKind] = (DeclarationKind.CLASS,)):
        self.accepted_kinds = list(dict.fromkeys(accepted_kinds))

    def collect(self, declarations: Iterable[Declaration]) -> list[MarkedEntity]:
        """
        Collect the marked entities of one round.

        Order is preserved and duplicates are kept: each declaration yields
        exactly one entity.

        Raises:
            KindMismatchError: On the first declaration whose kind is not accepted
        """
        entities = []
        for declaration in declarations:
            if declaration.kind not in self.accepted_kinds:
                raise KindMismatchError(
                    declaration, [kind.value for kind in self.accepted_kinds]
                )
            logger.debug(f"Collected {declaration.identity.fqn}")
            entities.append(
                MarkedEntity(
                    identity=declaration.identity,
                    source_file=declaration.source_file,
                    line=declaration.line,
                )
            )
        return entities


def collect(
    declarations: Iterable[Declaration],
    accepted_kinds: Iterable[DeclarationKind] = (DeclarationKind.CLASS,),
) -> list[MarkedEntity]:
    """Convenience function to collect with a one-off collector."""
    return EntityCollector(accepted_kinds).collect(declarations)
