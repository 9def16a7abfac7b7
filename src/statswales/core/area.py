from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from statswales.core.errors import InvalidArgumentError, NotFoundError
from statswales.core.formatting import NO_MEASURES_PLACEHOLDER, display_name
from statswales.core.measure import MeasureSeries


def _normalize_lang(lang: str) -> str:
    return str(lang).strip().lower()


@dataclass
class Area:
    """
    A local authority: its authority code, names by language and measures.

    Names are keyed by ISO 639-3 language code ('eng', 'cym'); measures by
    lowercase measure code. The authority code is kept exactly as given.
    """
    authority_code: str
    names: Dict[str, str] = field(default_factory=dict)
    measures: Dict[str, MeasureSeries] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def get_name(self, lang: str) -> str:
        try:
            return self.names[_normalize_lang(lang)]
        except KeyError:
            raise NotFoundError(f"No name found for language {lang}") from None

    def has_name(self, lang: str) -> bool:
        return _normalize_lang(lang) in self.names

    def set_name(self, lang: str, name: str) -> None:
        if not isinstance(lang, str) or len(lang) != 3 or not lang.isalpha() or not lang.isascii():
            raise InvalidArgumentError(
                f"Language code must be three alphabetical letters only, got {lang!r}"
            )
        self.names[lang.lower()] = name

    # ------------------------------------------------------------------
    # Measures
    # ------------------------------------------------------------------

    def get_measure(self, code: str) -> MeasureSeries:
        try:
            return self.measures[str(code).lower()]
        except KeyError:
            raise NotFoundError(f"No measure found matching {code}") from None

    def has_measure(self, code: str) -> bool:
        return str(code).lower() in self.measures

    def set_measure(self, code: str, series: MeasureSeries) -> None:
        """
        Store `series` under `code`, combining with any series already there.

        Overlapping years take the incoming values. A copy is stored so the
        caller's object is never shared with this Area.
        """
        key = str(code).lower()
        existing = self.measures.get(key)
        if existing is not None:
            existing.merge(series)
            return

        stored = series.copy()
        stored.code = key
        self.measures[key] = stored

    def measure_codes(self) -> List[str]:
        return sorted(self.measures)

    def iter_measures(self) -> Iterator[MeasureSeries]:
        for code in self.measure_codes():
            yield self.measures[code]

    def size(self) -> int:
        return len(self.measures)

    def __len__(self) -> int:
        return len(self.measures)

    # ------------------------------------------------------------------
    # Merge / copy
    # ------------------------------------------------------------------

    def merge(self, other: "Area") -> "Area":
        """
        Overwrite existing, combine new.

        Names from `other` replace names in the same language; measures are
        combined per code with `other` winning on overlapping years. Merging
        the same source twice leaves the Area unchanged after the first time.
        """
        for lang, name in other.names.items():
            self.names[lang] = name
        for code, series in other.measures.items():
            self.set_measure(code, series)
        return self

    def copy(self) -> "Area":
        return Area(
            self.authority_code,
            dict(self.names),
            {code: series.copy() for code, series in self.measures.items()},
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_table(self) -> str:
        lines = [f"{display_name(self.names)} ({self.authority_code})"]
        if not self.measures:
            lines.append(NO_MEASURES_PLACEHOLDER)
            return "\n".join(lines)

        for series in self.iter_measures():
            lines.append(series.to_table())
            lines.append("")
        return "\n".join(lines)

    def to_json_tree(self) -> Dict[str, Any]:
        return {
            "names": {lang: self.names[lang] for lang in sorted(self.names)},
            "measures": {s.code: s.to_json_tree() for s in self.iter_measures()},
        }

    def __str__(self) -> str:
        return self.to_table()
