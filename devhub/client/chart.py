import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from devhub.client.export import format_value
from devhub.client.view_model import CompoundListState
from devhub.schemas.compound import CompoundRead

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartPoint:
    name: str
    x: float
    y: float

    @property
    def label(self) -> str:
        return f"{self.name}: pKa={format_value(self.x)}, Energy={format_value(self.y)} eV"


def project_points(compounds: Iterable[CompoundRead]) -> List[ChartPoint]:
    """One point per compound that has both pKa and energy_eV."""
    points = []
    for compound in compounds:
        pka, energy = compound.pka, compound.energy_ev
        if pka is None or energy is None:
            continue
        points.append(ChartPoint(name=compound.name, x=pka, y=energy))
    return points


class ChartRenderer:
    """
    pKa vs energy scatter plot of the current list.

    Subscribe an instance to the view-model; it redraws only when the list
    object itself changes, closing the previous figure first.
    """

    def __init__(self, output_path: Optional[Path] = None):
        self.output_path = output_path
        self.figure = None
        self.points: List[ChartPoint] = []
        self._compounds: Optional[Sequence[CompoundRead]] = None

    def __call__(self, state: CompoundListState) -> None:
        self.render(state.compounds)

    def render(self, compounds: Sequence[CompoundRead]):
        if compounds is self._compounds:
            return self.figure
        self._compounds = compounds
        self.dispose()

        if not compounds:
            return None

        self.points = project_points(compounds)
        fig, ax = plt.subplots(figsize=(8, 6))
        ax.scatter(
            [p.x for p in self.points],
            [p.y for p in self.points],
            c="#1e90ff",
            edgecolors="#1e40af",
            linewidths=1,
            label="Compounds (pKa vs Energy eV)",
        )
        for point in self.points:
            ax.annotate(point.label, (point.x, point.y), xytext=(4, 4),
                        textcoords="offset points", fontsize=7)
        ax.set_xlabel("pKa")
        ax.set_ylabel("Energy (eV)")
        ax.legend(loc="best")

        if self.output_path:
            fig.savefig(self.output_path, dpi=150, bbox_inches='tight')
            logger.debug(f"Chart written to {self.output_path}")

        self.figure = fig
        return fig

    def dispose(self) -> None:
        if self.figure is not None:
            plt.close(self.figure)
            self.figure = None
            self.points = []
