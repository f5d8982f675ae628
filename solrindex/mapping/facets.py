"""Domain facet rules for seal records.

Each rule reads the values of one Dublin Core element and writes
single-valued facets (or, for keywords, a multi-valued facet) onto a
document. Rules run in table order; a later rule writing the same
facet replaces the earlier value.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from solrindex.mapping import rules
from solrindex.mapping.document import Document
from solrindex.mapping.rules import Bucket
from solrindex.records.model import DUBLIN_CORE, Record

# (target facet label, offending value)
ErrorCallback = Callable[[str, str], None]

ACQUISITION_PREFIX = "Acquisition history :"
PERIOD_PREFIX = "Period remarks :"
PROVENIENCE_PREFIX = "Provenience remarks :"
SUBGENRE_PREFIX = "Subgenre remarks :"


class Selection(str, Enum):
    """Which values of an element a prefix rule keeps."""

    MATCHING = "matching"
    NOT_MATCHING = "not_matching"


class FacetRule(Protocol):
    """A rule mapping one element's values onto a document."""

    source_field: str

    def apply(self, values: list[str], document: Document, on_error: ErrorCallback) -> None:
        """Write facets derived from values onto document."""
        ...


@dataclass(frozen=True)
class SingleValueRule:
    """Copy the first value of an element into a facet.

    Args:
        source_field: Element name.
        target: Facet name.
        normalize: Trim and capitalize the value.
        skip_blank: Leave the facet untouched when the value is blank.
    """

    source_field: str
    target: str
    normalize: bool = False
    skip_blank: bool = False

    def apply(self, values: list[str], document: Document, on_error: ErrorCallback) -> None:
        value = values[0] if values else ""
        if self.skip_blank and not value.strip():
            return
        if self.normalize:
            value = rules.normalize(value)
        document.set_facet(self.target, value or None)


@dataclass(frozen=True)
class PrefixRule:
    """Select values by prefix and write each into a facet.

    Matching values lose their prefix. Every selected value is written,
    so the last one wins.

    Args:
        source_field: Element name.
        target: Facet name.
        prefix: Prefix that selects values.
        selection: Keep matching or non-matching values.
        cut_at_paren: Drop a trailing parenthesized remark.
    """

    source_field: str
    target: str
    prefix: str
    selection: Selection = Selection.MATCHING
    cut_at_paren: bool = False

    def apply(self, values: list[str], document: Document, on_error: ErrorCallback) -> None:
        if self.selection is Selection.MATCHING:
            selected = rules.matching(values, self.prefix)
        else:
            selected = rules.not_matching(values, self.prefix)
        for value in selected:
            value = rules.normalize(value)
            if self.cut_at_paren:
                value = rules.truncate_at_paren(value)
            document.set_facet(self.target, value)


@dataclass(frozen=True)
class Measurement:
    """One ``"<Label> : <number> <unit>"`` measurement.

    Args:
        prefix: Value prefix, e.g. ``"Height :"``.
        units: Unit tokens removed before parsing.
        buckets: Ordered bucket table.
        targets: Facets receiving the bucket label.
        label: Name used in error reports.
    """

    prefix: str
    units: tuple[str, ...]
    buckets: tuple[Bucket, ...]
    targets: tuple[str, ...]
    label: str

    def apply(self, value: str, document: Document, on_error: ErrorCallback) -> None:
        text = rules.normalize(rules.strip_prefix(value, self.prefix))
        text = rules.strip_units(text, self.units)
        number = rules.parse_number(text)
        if number is None:
            on_error(self.label, text)
            return
        interval = rules.bucket_for(number, self.buckets)
        for target in self.targets:
            document.set_facet(target, interval)


@dataclass(frozen=True)
class MeasurementRule:
    """Bucket measurements found among an element's values.

    Values are visited in order and each is checked against every
    measurement, so facet overwrites follow the value order.
    """

    source_field: str
    measurements: tuple[Measurement, ...] = field(default_factory=tuple)

    def apply(self, values: list[str], document: Document, on_error: ErrorCallback) -> None:
        for value in values:
            for measurement in self.measurements:
                if rules.has_prefix(value, measurement.prefix):
                    measurement.apply(value, document, on_error)


@dataclass(frozen=True)
class SplitRule:
    """Split values by prefix between a facet and a multi-valued facet.

    Args:
        source_field: Element name.
        prefix: Prefix selecting the facet values.
        matched_target: Facet for prefixed values (last wins).
        other_target: Multi-valued facet collecting the rest.
    """

    source_field: str
    prefix: str
    matched_target: str
    other_target: str

    def apply(self, values: list[str], document: Document, on_error: ErrorCallback) -> None:
        for value in values:
            if rules.has_prefix(value, self.prefix):
                document.set_facet(
                    self.matched_target,
                    rules.normalize(rules.strip_prefix(value, self.prefix)),
                )
            else:
                document.add_facet_value(self.other_target, rules.normalize(value))


FORMAT_MEASUREMENTS: tuple[Measurement, ...] = (
    Measurement("Height :", (" mm",), rules.HEIGHT_BUCKETS, ("height",), "height"),
    Measurement("Width :", (" mm",), rules.WIDTH_BUCKETS, ("diameter",), "width"),
    Measurement("Weight :", ("g",), rules.WEIGHT_BUCKETS, ("weight",), "weight"),
    # Thickness feeds both facets; kept as found in the production index.
    Measurement(
        "Thickness :",
        (" mm", " m"),
        rules.THICKNESS_BUCKETS,
        ("weight", "perforated-diameter"),
        "perforated diameter",
    ),
)

DEFAULT_RULES: tuple[FacetRule, ...] = (
    SingleValueRule("Publisher", "collection"),
    PrefixRule("Provenance", "subcollection", ACQUISITION_PREFIX, Selection.NOT_MATCHING),
    PrefixRule("Temporal Coverage", "period", PERIOD_PREFIX, cut_at_paren=True),
    PrefixRule("Spatial Coverage", "area", PROVENIENCE_PREFIX),
    SingleValueRule("Medium", "material", normalize=True, skip_blank=True),
    MeasurementRule("Format", FORMAT_MEASUREMENTS),
    SplitRule("Subject", SUBGENRE_PREFIX, "iconography", "keywords"),
)


class FacetExtractor:
    """Applies the facet rule table to a record.

    Args:
        rule_set: Rules to apply, in order. Defaults to the seal rules.
        vocabulary: Element set the rules read from.

    Example::

        extractor = FacetExtractor()
        extractor.extract(record, document, on_error=log_error)
    """

    def __init__(
        self,
        rule_set: tuple[FacetRule, ...] | list[FacetRule] = DEFAULT_RULES,
        vocabulary: str = DUBLIN_CORE,
    ) -> None:
        self._rules = tuple(rule_set)
        self._vocabulary = vocabulary

    @property
    def rules(self) -> tuple[FacetRule, ...]:
        """Return the rules in application order."""
        return self._rules

    def extract(self, record: Record, document: Document, on_error: ErrorCallback) -> None:
        """Apply every rule to the record's values."""
        for rule in self._rules:
            values = record.values(self._vocabulary, rule.source_field)
            rule.apply(values, document, on_error)
