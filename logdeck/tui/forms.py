"""Grouped form engine: focus traversal, per-field validation and submission.

Forms are declared as tables of ``FieldDef`` grouped in ``FormGroup``s and
instantiated per page. Focus moves linearly through the fields; leaving a
field validates it, leaving the last field of a group validates the whole
group, and leaving the last group reports the form ready to submit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional

from .messages import KeyMsg

FieldKind = Literal["text", "number", "select", "configs"]
FocusResult = Literal["moved", "blocked", "ready", "edited", "ignored"]
Validator = Callable[[str], Optional[str]]

CONFIG_ENTRY_RE = re.compile(r"^[\w.\-]+=[^\s=]+$")
INTEGER_RE = re.compile(r"-?[0-9]+")
CONFIG_FORMAT_ERROR = 'please enter configurations in the format "config=value"'

FOCUS_BAR = "┃ "
BLUR_BAR = "  "


def required(label: str) -> Validator:
    def check(raw: str) -> Optional[str]:
        if not raw.strip():
            return f"{label} cannot be empty."
        return None

    return check


def positive_int(noun: str, label: str) -> Validator:
    def check(raw: str) -> Optional[str]:
        value = raw.strip()
        if not value:
            return f"{label} cannot be empty."
        if not INTEGER_RE.fullmatch(value):
            return f"'{raw}' is not a valid numeric {noun} value"
        parsed = int(value)
        if parsed <= 0:
            return "Value must be greater than zero."
        return None

    return check


def partition_index(partition_count: int) -> Validator:
    """Optional partition index bounded by ``partition_count``; empty means unset."""

    def check(raw: str) -> Optional[str]:
        value = raw.strip()
        if not value:
            return None
        if not INTEGER_RE.fullmatch(value):
            return f"'{raw}' is not a valid numeric partition value"
        parsed = int(value)
        if parsed < 0:
            return "value must be at least zero"
        if parsed >= partition_count:
            return f"partition index {parsed} is invalid, valid range is 0-{partition_count - 1}"
        return None

    return check


@dataclass(frozen=True)
class FieldDef:
    key: str
    label: str
    kind: FieldKind = "text"
    options: tuple[str, ...] = ()
    validator: Optional[Validator] = None
    multiline: bool = False
    secret: bool = False
    entries_title: str = "Entries:"


@dataclass(frozen=True)
class FormGroup:
    title: str
    fields: tuple[FieldDef, ...]


@dataclass
class FieldState:
    definition: FieldDef
    value: str = ""
    selected: int = 0
    entries: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def key(self) -> str:
        return self.definition.key

    @property
    def kind(self) -> FieldKind:
        return self.definition.kind


class Form:
    def __init__(self, groups: tuple[FormGroup, ...], initial: dict[str, Any] | None = None) -> None:
        if not groups or any(not g.fields for g in groups):
            raise ValueError("a form needs at least one group and every group at least one field")
        self.groups = groups
        self.initial: dict[str, Any] = dict(initial or {})
        self.states: dict[str, FieldState] = {}
        self.group_idx = 0
        self.field_idx = 0
        self.focused = False
        self.reset()

    # -- focus ------------------------------------------------------------

    def focus(self) -> None:
        self.group_idx = 0
        self.field_idx = 0
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    @property
    def current(self) -> FieldState | None:
        if not self.focused:
            return None
        return self.states[self.groups[self.group_idx].fields[self.field_idx].key]

    def _group_states(self, group_idx: int) -> list[FieldState]:
        return [self.states[f.key] for f in self.groups[group_idx].fields]

    def move_focus_forward(self) -> FocusResult:
        if not self.focused:
            self.focus()
            return "moved"
        group = self.groups[self.group_idx]
        if self.field_idx < len(group.fields) - 1:
            if self._validate(self.current) is not None:
                return "blocked"
            self.field_idx += 1
            return "moved"

        results = [self._validate(st) for st in self._group_states(self.group_idx)]
        if any(err is not None for err in results):
            return "blocked"
        if self.group_idx < len(self.groups) - 1:
            self.group_idx += 1
            self.field_idx = 0
            return "moved"
        return "ready"

    def move_focus_backward(self) -> FocusResult:
        if not self.focused:
            self.focus()
            return "moved"
        if self.field_idx > 0:
            self.field_idx -= 1
            return "moved"
        if self.group_idx > 0:
            self.group_idx -= 1
            self.field_idx = len(self.groups[self.group_idx].fields) - 1
            return "moved"
        return "ignored"

    # -- editing ----------------------------------------------------------

    def update(self, msg: KeyMsg) -> FocusResult:
        if msg.paste:
            return "edited" if self.handle_input(msg) else "ignored"
        if msg.key == "tab":
            return self.move_focus_forward()
        if msg.key == "shift+tab":
            return self.move_focus_backward()
        if msg.key == "enter":
            st = self.current
            if st is not None and st.kind == "configs" and st.value.strip():
                return self.add_config_entry()
            return self.move_focus_forward()
        return "edited" if self.handle_input(msg) else "ignored"

    def handle_input(self, msg: KeyMsg) -> bool:
        st = self.current
        if st is None:
            return False
        if st.kind == "select":
            last = len(st.definition.options) - 1
            if msg.key == "up":
                st.selected = max(0, st.selected - 1)
                return True
            if msg.key == "down":
                st.selected = min(last, st.selected + 1)
                return True
            return False

        if msg.key == "backspace" and not msg.paste:
            if not st.value:
                return False
            self._set_text(st, st.value[:-1])
            return True
        if msg.key == "ctrl+u" and not msg.paste:
            self._set_text(st, "")
            return True
        if msg.key == "ctrl+j" and not msg.paste:
            if not st.definition.multiline:
                return False
            self._set_text(st, st.value + "\n")
            return True
        text = msg.text
        if not text:
            return False
        if not st.definition.multiline:
            text = text.replace("\r", "").replace("\n", " ")
        self._set_text(st, st.value + text)
        return True

    @staticmethod
    def _set_text(st: FieldState, value: str) -> None:
        st.value = value
        st.error = None

    def add_config_entry(self) -> FocusResult:
        st = self.current
        if st is None or st.kind != "configs":
            return "ignored"
        raw = st.value.strip()
        if not raw:
            return "ignored"
        if not CONFIG_ENTRY_RE.match(raw):
            st.error = CONFIG_FORMAT_ERROR
            return "blocked"
        name, value = raw.split("=", 1)
        st.entries[name] = value
        st.value = ""
        st.error = None
        return "edited"

    def set_value(self, key: str, value: Any) -> None:
        st = self.states[key]
        st.error = None
        if st.kind == "select":
            options = st.definition.options
            st.selected = options.index(value) if value in options else 0
        elif st.kind == "configs":
            st.entries = dict(value or {})
        else:
            st.value = "" if value is None else str(value)

    # -- validation and submission -----------------------------------------

    def _validate(self, st: FieldState | None) -> Optional[str]:
        if st is None:
            return None
        err: Optional[str] = None
        if st.kind == "configs":
            if st.value.strip():
                if self._commit_pending(st):
                    err = None
                else:
                    err = CONFIG_FORMAT_ERROR
        elif st.kind != "select" and st.definition.validator is not None:
            err = st.definition.validator(st.value)
        st.error = err
        return err

    @staticmethod
    def _commit_pending(st: FieldState) -> bool:
        raw = st.value.strip()
        if not CONFIG_ENTRY_RE.match(raw):
            return False
        name, value = raw.split("=", 1)
        st.entries[name] = value
        st.value = ""
        return True

    @property
    def errors(self) -> dict[str, str]:
        return {key: st.error for key, st in self.states.items() if st.error}

    def submit(self) -> tuple[dict[str, Any] | None, dict[str, str]]:
        first_invalid: tuple[int, int] | None = None
        for g_idx, group in enumerate(self.groups):
            for f_idx, fdef in enumerate(group.fields):
                if self._validate(self.states[fdef.key]) is not None and first_invalid is None:
                    first_invalid = (g_idx, f_idx)
        if first_invalid is not None:
            self.group_idx, self.field_idx = first_invalid
            self.focused = True
            return None, self.errors
        return self.values(), {}

    def fail(self, key: str, message: str) -> None:
        """Attach an error found outside the field validators and focus that field."""
        self.states[key].error = message
        for g_idx, group in enumerate(self.groups):
            for f_idx, fdef in enumerate(group.fields):
                if fdef.key == key:
                    self.group_idx, self.field_idx = g_idx, f_idx
                    self.focused = True
                    return

    def values(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for st in self.states.values():
            if st.kind == "select":
                options = st.definition.options
                out[st.key] = options[st.selected] if options else ""
            elif st.kind == "configs":
                out[st.key] = dict(st.entries)
            else:
                out[st.key] = st.value
        return out

    def reset(self) -> None:
        self.states = {}
        for group in self.groups:
            for fdef in group.fields:
                self.states[fdef.key] = FieldState(definition=fdef)
        for key, value in self.initial.items():
            if key in self.states:
                self.set_value(key, value)
        self.focus()

    # -- rendering ----------------------------------------------------------

    def render(self) -> str:
        lines: list[str] = []
        current = self.current
        for g_idx, group in enumerate(self.groups):
            if g_idx:
                lines.append("")
            if group.title:
                lines.append(group.title)
            for fdef in group.fields:
                st = self.states[fdef.key]
                bar = FOCUS_BAR if st is current else BLUR_BAR
                lines.extend(bar + line for line in self._render_field(st))
        return "\n".join(lines)

    @staticmethod
    def _render_field(st: FieldState) -> list[str]:
        fdef = st.definition
        out = [fdef.label]
        if st.kind == "select":
            for idx, option in enumerate(fdef.options):
                marker = "> " if idx == st.selected else "  "
                out.append(marker + option)
        elif fdef.multiline:
            for number, line in enumerate(st.value.split("\n"), start=1):
                out.append(f"{number} {line}")
        else:
            shown = "*" * len(st.value) if fdef.secret else st.value
            out.append("> " + shown)
        if st.kind == "configs" and st.entries:
            out.append(fdef.entries_title)
            out.extend(f"  {name}={value}" for name, value in st.entries.items())
        if st.error:
            out.append("* " + st.error)
        return out
