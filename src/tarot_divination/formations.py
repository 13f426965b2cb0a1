"""Formation selection and positional labels."""

import logging
import random
from typing import Mapping, Optional

from tarot_divination.exceptions import InvalidFormationError
from tarot_divination.models import Formation

logger = logging.getLogger(__name__)

CUT_LABEL = "切牌"


class FormationSelector:
    """Pick a spread layout and one of its label-sets."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def pick_formation(self, formations: Mapping[str, Formation]) -> tuple[str, Formation]:
        """Pick a formation uniformly at random."""
        if not formations:
            raise InvalidFormationError("No formations are configured")
        names = sorted(formations)
        name = names[self.rng.randrange(len(names))]
        return name, formations[name]

    def validate(self, formation: Formation) -> None:
        """Check every label-set against the formation's card count.

        Raises:
            InvalidFormationError: If there are no label-sets or one has the wrong length
        """
        if not formation.representations:
            raise InvalidFormationError(f"Formation '{formation.name}' has no label-sets")
        for labels in formation.representations:
            if len(labels) != formation.cards_num:
                raise InvalidFormationError(
                    f"Formation '{formation.name}' needs {formation.cards_num} labels, "
                    f"label-set {labels} has {len(labels)}"
                )

    def pick_labels(self, formation: Formation) -> list[str]:
        """Pick one of the formation's label-sets uniformly at random."""
        self.validate(formation)
        labels = formation.representations[self.rng.randrange(len(formation.representations))]
        return list(labels)


def apply_cut(labels: list[str], formation: Formation) -> list[str]:
    """Relabel the last position as the cut card when the formation has one."""
    if not formation.is_cut or not labels:
        return list(labels)
    return [*labels[:-1], CUT_LABEL]
