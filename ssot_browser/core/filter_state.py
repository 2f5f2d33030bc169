from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ssot_browser.core.record_store import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FacetSpec:
    """
    Static description of one filterable dimension.

    :param name: stable identifier (used in UI ids and the filter store)
    :param column: source column in the dataset
    :param label: human-readable label for the dropdown
    """
    name: str
    column: str
    label: str = ""

    @property
    def display_label(self) -> str:
        return self.label or self.column


@dataclass
class Facet:
    """
    Runtime state of one facet.

    Fields:

    - options: values currently offered, derived from the OTHER facets' selections
    - selected: values the user has chosen to include (always a subset of options
      after reconciliation)
    - seeded: True once the selection has been initialised to "all options"
    - cleared: True when the user explicitly emptied the selection; an empty
      selection that came from reconciliation is re-seeded instead
    """
    spec: FacetSpec
    options: List[str] = field(default_factory=list)
    selected: List[str] = field(default_factory=list)
    seeded: bool = False
    cleared: bool = False

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def column(self) -> str:
        return self.spec.column


# -----------------------------------------------------------------------------
# Pure functions
# -----------------------------------------------------------------------------
def distinct_values(records: Iterable[Mapping[str, str]], column: str) -> List[str]:
    """Distinct non-empty values of `column`, in first-occurrence order."""
    return list(dict.fromkeys(v for v in (r.get(column, "") for r in records) if v))


def record_matches(
    record: Mapping[str, str],
    facets: Sequence[Facet],
    skip: Optional[str] = None,
) -> bool:
    """
    True if `record` satisfies every facet's selection, ignoring facet `skip`.
    Facets that were never seeded do not constrain anything yet.
    """
    for facet in facets:
        if facet.name == skip or not facet.seeded:
            continue
        if record.get(facet.column, "") not in facet.selected:
            return False
    return True


def compute_options(
    facet: Facet,
    records: Sequence[Mapping[str, str]],
    facets: Sequence[Facet],
) -> List[str]:
    """
    Options for `facet`: distinct non-empty values of its column among the
    records consistent with every other facet's current selection.

    The facet's own selection is ignored so a narrow selection can be broadened.
    """
    candidates = (r for r in records if record_matches(r, facets, skip=facet.name))
    return distinct_values(candidates, facet.column)


def compute_visible_records(
    records: Sequence[Record],
    facets: Sequence[Facet],
) -> List[Record]:
    """
    Records satisfying every seeded facet's selection.
    An empty selection on a seeded facet hides everything (it does not disable the facet).
    """
    if any(f.seeded and not f.selected for f in facets):
        return []
    return [r for r in records if record_matches(r, facets)]


def toggle_option(facet: Facet, value: str, included: bool) -> None:
    if included:
        if value not in facet.selected:
            facet.selected.append(value)
        facet.cleared = False
    else:
        facet.selected = [v for v in facet.selected if v != value]
        if not facet.selected:
            facet.cleared = True


def select_all(facet: Facet) -> None:
    facet.selected = list(facet.options)
    facet.cleared = False


def deselect_all(facet: Facet) -> None:
    facet.selected = []
    facet.cleared = True


def reconcile(facet: Facet, options: List[str]) -> bool:
    """
    Install new options on `facet` and clamp its selection.

    - first non-empty options: seed selection to all options
    - selected values no longer offered are dropped
    - if that empties a selection the user did not clear, re-seed to all options
    - if there is nothing to re-seed from, un-seed the facet so it stops
      constraining the others until options come back

    Returns True if the selection (or seeded flag) changed.
    """
    before = (list(facet.selected), facet.seeded)
    facet.options = options

    if not facet.seeded:
        if options:
            facet.selected = list(options)
            facet.seeded = True
            facet.cleared = False
        return (facet.selected, facet.seeded) != before

    # Option order, so the dropdown renders consistently
    current = set(facet.selected)
    kept = [v for v in options if v in current]
    if not kept and not facet.cleared:
        if options:
            kept = list(options)
        else:
            facet.seeded = False
    facet.selected = kept
    return (facet.selected, facet.seeded) != before


# -----------------------------------------------------------------------------
# Stateful wrapper used by the UI
# -----------------------------------------------------------------------------
class FilterState:
    """
    Ordered collection of facets for one table, bound to that table's records.

    Every mutation triggers a full, pure recomputation of all option sets
    followed by reconciliation, repeated until selections stop changing
    (re-seeding one facet can change the options of the others).
    """

    def __init__(self, facets: Sequence[Facet], records: Sequence[Record] = ()) -> None:
        names = [f.name for f in facets]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate facet names: {names}")
        self.facets: List[Facet] = list(facets)
        self._records: Sequence[Record] = tuple(records)
        if self._records:
            self.refresh()

    @classmethod
    def from_specs(cls, specs: Sequence[FacetSpec], records: Sequence[Record] = ()) -> FilterState:
        return cls([Facet(spec=s) for s in specs], records)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------
    def facet(self, name: str) -> Facet:
        for f in self.facets:
            if f.name == name:
                return f
        raise KeyError(f"Unknown facet '{name}'")

    @property
    def records(self) -> Sequence[Record]:
        return self._records

    def selections(self) -> Dict[str, List[str]]:
        return {f.name: list(f.selected) for f in self.facets}

    def options(self) -> Dict[str, List[str]]:
        return {f.name: list(f.options) for f in self.facets}

    def visible_records(self) -> List[Record]:
        return compute_visible_records(self._records, self.facets)

    # -------------------------------------------------------------------------
    # Recompute
    # -------------------------------------------------------------------------
    def bind(self, records: Sequence[Record]) -> FilterState:
        """Attach a (new) dataset; selections survive and are re-clamped."""
        self._records = tuple(records)
        self.refresh()
        return self

    def refresh(self) -> None:
        # A facet can be un-seeded and re-seeded once per change, so 2n+2 passes suffice
        for _ in range(2 * len(self.facets) + 2):
            new_options = [compute_options(f, self._records, self.facets) for f in self.facets]
            changed = False
            for facet, opts in zip(self.facets, new_options):
                changed |= reconcile(facet, opts)
            if not changed:
                return
        logger.warning(
            "Facet reconciliation did not settle",
            extra={"facets": [f.name for f in self.facets]},
        )

    # -------------------------------------------------------------------------
    # User operations
    # -------------------------------------------------------------------------
    def toggle_option(self, name: str, value: str, included: bool) -> None:
        toggle_option(self.facet(name), value, included)
        self.refresh()

    def select_all(self, name: str) -> None:
        select_all(self.facet(name))
        self.refresh()

    def deselect_all(self, name: str) -> None:
        deselect_all(self.facet(name))
        self.refresh()

    def set_selection(self, name: str, values: Iterable[str]) -> None:
        """
        Replace a facet's selection wholesale (multi-select dropdown semantics).
        Values not currently offered are ignored.
        """
        facet = self.facet(name)
        wanted = set(values or [])
        facet.selected = [v for v in facet.options if v in wanted]
        facet.cleared = not facet.selected
        self.refresh()

    def reset(self) -> None:
        """
        Select every value present in the dataset on every facet.

        Mutual filtering can narrow two facets so that neither offers the
        values needed to broaden the other; this is the way back out.
        """
        for facet in self.facets:
            facet.selected = distinct_values(self._records, facet.column)
            facet.seeded = bool(facet.selected)
            facet.cleared = False
        self.refresh()

    # -------------------------------------------------------------------------
    # Serialisation (dcc.Store)
    # -------------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            f.name: {
                "selected": list(f.selected),
                "seeded": f.seeded,
                "cleared": f.cleared,
            }
            for f in self.facets
        }

    @classmethod
    def from_dict(
        cls,
        specs: Sequence[FacetSpec],
        data: Optional[Mapping[str, Any]],
        records: Sequence[Record] = (),
    ) -> FilterState:
        data = data or {}
        facets: List[Facet] = []
        for spec in specs:
            raw = data.get(spec.name) or {}
            facets.append(
                Facet(
                    spec=spec,
                    selected=list(raw.get("selected", [])),
                    seeded=bool(raw.get("seeded", False)),
                    cleared=bool(raw.get("cleared", False)),
                )
            )
        return cls(facets, records)
