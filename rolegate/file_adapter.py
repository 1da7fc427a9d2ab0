"""Adapters that keep policy rules in a comma separated text file."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from rolegate.adapter import (
    Adapter,
    AdapterError,
    BatchAdapter,
    Filter,
    FilteredAdapter,
    UnsupportedOperationError,
    load_policy_line,
)
from rolegate.model import Model

LineHandler = Callable[[str, Model], None]


class FileAdapter(Adapter):
    """Loads policy from a file and saves policy to a file."""

    def __init__(self, file_path: str) -> None:
        self.file_path = str(file_path)
        self.filtered = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.file_path!r})"

    def _require_path(self) -> None:
        if not self.file_path:
            raise AdapterError("Invalid file path, file path cannot be empty")

    def _unsupported(self, operation: str, sec: str, p_type: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(
            f"{type(self).__name__} cannot {operation} for {sec}/{p_type} "
            f"in {self.file_path!r}; save the whole policy instead"
        )

    def load_policy(self, model: Model) -> None:
        self._require_path()
        self.load_policy_file(model, load_policy_line)

    def save_policy(self, model: Model) -> None:
        self._require_path()
        lines = [
            f"{p_type}, {', '.join(rule)}"
            for sec in ("p", "g")
            for p_type, assertion in model.m.get(sec, {}).items()
            for rule in assertion.policy
        ]
        self.save_policy_file("\n".join(lines).rstrip("\n"))

    def _read_lines(self) -> list[str]:
        try:
            with open(self.file_path, encoding="utf-8") as handle:
                return [line.strip() for line in handle]
        except OSError as exc:
            raise AdapterError("Cannot open file.") from exc

    def load_policy_file(self, model: Model, handler: LineHandler) -> None:
        """Pass every trimmed line of the file to ``handler``."""
        for line in self._read_lines():
            handler(line, model)

    def save_policy_file(self, text: str) -> None:
        """Replace the file's contents with ``text``."""
        try:
            with open(self.file_path, "w", encoding="utf-8") as handle:
                handle.write(text)
        except OSError as exc:
            raise AdapterError("Cannot open file.") from exc

    def add_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> None:
        """Single-rule auto-save is not supported by a file."""
        raise self._unsupported(f"add rule {list(rule)!r}", sec, p_type)

    def remove_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> None:
        """Single-rule auto-save is not supported by a file."""
        raise self._unsupported(f"remove rule {list(rule)!r}", sec, p_type)

    def remove_filtered_policy(
        self, sec: str, p_type: str, field_index: int, field_values: Sequence[str]
    ) -> None:
        """Filtered auto-save removal is not supported by a file."""
        raise self._unsupported(
            f"remove rules matching {list(field_values)!r} from field {field_index}",
            sec,
            p_type,
        )

    def is_filtered(self) -> bool:
        return self.filtered


class BatchFileAdapter(FileAdapter, BatchAdapter):
    """File adapter exposing the batch interface; batch writes are unsupported."""

    def add_policies(self, sec: str, p_type: str, rules: Sequence[Sequence[str]]) -> None:
        """Batch auto-save is not supported by a file."""
        raise self._unsupported(f"add {len(rules)} rules", sec, p_type)

    def remove_policies(self, sec: str, p_type: str, rules: Sequence[Sequence[str]]) -> None:
        """Batch auto-save is not supported by a file."""
        raise self._unsupported(f"remove {len(rules)} rules", sec, p_type)


def _filter_words(words: Sequence[str], wanted: Sequence[str]) -> bool:
    if len(words) < len(wanted) + 1:
        return True
    return any(
        value and value.strip() != word.strip() for value, word in zip(wanted, words[1:])
    )


def _filter_line(line: str, policy_filter: Filter | None) -> bool:
    """Return True if ``line`` should be skipped."""
    if policy_filter is None:
        return False
    words = line.split(",")
    kind = words[0].strip()
    if kind == "p":
        wanted = policy_filter.p
    elif kind == "g":
        wanted = policy_filter.g
    else:
        wanted = []
    return _filter_words(words, wanted)


class FilteredFileAdapter(FileAdapter, FilteredAdapter):
    """File adapter that can load only the rules matching a filter."""

    def __init__(self, file_path: str) -> None:
        super().__init__(file_path)
        self.filtered = True

    def load_policy(self, model: Model) -> None:
        self.filtered = False
        super().load_policy(model)

    def load_filtered_policy(self, model: Model, policy_filter: Filter | None) -> None:
        if policy_filter is None:
            self.load_policy(model)
            return
        self._require_path()
        for line in self._read_lines():
            if not _filter_line(line, policy_filter):
                load_policy_line(line, model)
        self.filtered = True

    def is_filtered(self) -> bool:
        return self.filtered

    def save_policy(self, model: Model) -> None:
        if self.filtered:
            raise AdapterError("Cannot save a filtered policy")
        super().save_policy(model)