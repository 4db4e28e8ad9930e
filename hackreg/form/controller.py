# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Multi-step registration form as an explicit state machine.

Steps:
    1 team ─► 2 leader ─► 3 members ─► 4 confirmation ─► submit

``transition`` is the only place the step index changes:
    next   allowed when every field of the current step validates
    prev   always allowed above step 1
    jump   backward always; forward only when every earlier step validates
Entering step 3 rebuilds the member blocks for the chosen team size and
entering step 4 rebuilds the read-only summary.

On reload the draft restores field values and the team size but the form
always starts again at step 1.
"""
import string
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hackreg import validation as rules
from hackreg.core.logging import get_logger
from hackreg.form.api_client import SubmissionError
from hackreg.form.draft import SIZE_KEY, STEP_KEY, DraftStore

logger = get_logger(__name__)

STEP_TEAM = 1
STEP_LEADER = 2
STEP_MEMBERS = 3
STEP_CONFIRM = 4
TOTAL_STEPS = 4

NEXT = "next"
PREV = "prev"
JUMP = "jump"

GENERIC_SUBMIT_ERROR = "Your registration could not be sent. Please try again."

CATEGORIES = {
    "sustainability": "Sustainability and Environment",
    "inclusion": "Social Inclusion and Accessibility",
    "education": "Education and the Future of Work",
}

TEAM_FIELDS = (
    ("teamName", rules.TEAM_NAME),
    ("category", rules.REQUIRED),
    ("teamSize", rules.TEAM_SIZE),
)

# suffix, rule, payload key
PERSON_FIELDS = (
    ("Names", rules.NAME, "name"),
    ("Surnames", rules.NAME, "last_name"),
    ("Email", rules.EMAIL, "email"),
    ("Phone", rules.PHONE, "phone"),
    ("Dni", rules.DNI, "dni"),
    ("UtpCode", rules.UTP_CODE, "utp_code"),
    ("Degree", rules.REQUIRED, "degree"),
)


def member_field(index: int, suffix: str) -> str:
    return f"member{index}{suffix}"


def leader_field(suffix: str) -> str:
    return f"leader{suffix}"


@dataclass
class FormField:
    name: str
    kind: str
    required: bool = True
    readonly: bool = False
    value: str = ""
    error: str = ""

    @property
    def invalid(self) -> bool:
        return bool(self.error)


@dataclass
class MemberBlock:
    index: int
    is_leader: bool
    fields: List[str] = field(default_factory=list)


class RegistrationFormController:
    def __init__(self, storage, client=None):
        self.current_step = STEP_TEAM
        self.team_size = 0
        self.fields: Dict[str, FormField] = {}
        self.member_blocks: List[MemberBlock] = []
        self.summary: Optional[Dict[str, Any]] = None

        self.busy = False
        self.submit_error: Optional[str] = None
        self.confirmation_id: Optional[str] = None

        self._draft = DraftStore(storage)
        self._client = client
        # draft values for member fields that do not exist until step 3
        self._pending: Dict[str, str] = {}

        for name, kind in TEAM_FIELDS:
            self._add_field(name, kind)
        for suffix, kind, _ in PERSON_FIELDS:
            self._add_field(leader_field(suffix), kind)
        self.load_draft()

    def _add_field(self, name: str, kind: str, readonly: bool = False, value: str = "") -> FormField:
        f = FormField(name=name, kind=kind, readonly=readonly, value=value)
        self.fields[name] = f
        return f

    # ── Field events ───────────────────────────────────────────────────

    def on_input(self, name: str, value: str):
        f = self.fields[name]
        if f.readonly:
            return
        f.value = value
        self.clear_error(name)

    def on_blur(self, name: str) -> bool:
        return self.validate_field(name)

    def on_change(self, name: str, value: str):
        f = self.fields[name]
        if f.readonly:
            return
        f.value = value
        if name == "teamSize":
            self.set_team_size(value)
        self.save_draft()

    def set_team_size(self, value):
        try:
            self.team_size = int(value)
        except (TypeError, ValueError):
            self.team_size = 0
        self.fields["teamSize"].value = str(self.team_size) if self.team_size else ""
        self.generate_member_forms()

    # ── Validation ─────────────────────────────────────────────────────

    def validate_field(self, name: str) -> bool:
        f = self.fields[name]
        f.error = rules.check(f.kind, f.value, f.required) or ""
        return not f.error

    def clear_error(self, name: str):
        self.fields[name].error = ""

    def step_fields(self, step: int) -> List[str]:
        if step == STEP_TEAM:
            return [name for name, _ in TEAM_FIELDS]
        if step == STEP_LEADER:
            return [leader_field(suffix) for suffix, _, _ in PERSON_FIELDS]
        if step == STEP_MEMBERS:
            if len(self.member_blocks) != self.team_size:
                self.generate_member_forms()
            else:
                self.fill_leader_data()
            return [name for block in self.member_blocks for name in block.fields]
        return []

    def validate_step(self, step: int) -> bool:
        # every field is checked so all errors show at once
        results = [self.validate_field(name) for name in self.step_fields(step)]
        if step == STEP_MEMBERS and not self.member_blocks:
            return False
        return all(results)

    def can_navigate_to(self, target: int) -> bool:
        if target < self.current_step:
            return True
        return all(self.validate_step(step) for step in range(1, target))

    # ── Transitions ────────────────────────────────────────────────────

    def transition(self, event: str, target: Optional[int] = None) -> int:
        """Apply a navigation event and return the resulting step."""
        if event == NEXT:
            if self.current_step < TOTAL_STEPS and self.validate_step(self.current_step):
                self._enter(self.current_step + 1)
        elif event == PREV:
            if self.current_step > STEP_TEAM:
                self._enter(self.current_step - 1)
        elif event == JUMP:
            if target is None or not STEP_TEAM <= target <= TOTAL_STEPS:
                raise ValueError(f"step must be between {STEP_TEAM} and {TOTAL_STEPS}")
            if target != self.current_step and self.can_navigate_to(target):
                self._enter(target)
        else:
            raise ValueError(f"unknown navigation event {event!r}")
        return self.current_step

    def next(self) -> int:
        return self.transition(NEXT)

    def prev(self) -> int:
        return self.transition(PREV)

    def jump_to(self, step: int) -> int:
        return self.transition(JUMP, step)

    def _enter(self, step: int):
        self.current_step = step
        if step == STEP_MEMBERS:
            self.generate_member_forms()
        elif step == STEP_CONFIRM:
            self.summary = self.confirmation_summary()

    # ── Member sub-forms ───────────────────────────────────────────────

    def generate_member_forms(self) -> List[MemberBlock]:
        if not rules.is_valid_team_size(self.team_size):
            return self.member_blocks

        for name in [n for n in self.fields if n.startswith("member")]:
            index = int(name[len("member"):].rstrip(string.ascii_letters))
            if index > self.team_size:
                del self.fields[name]

        blocks = []
        for i in range(1, self.team_size + 1):
            is_leader = i == 1
            names = []
            for suffix, kind, _ in PERSON_FIELDS:
                name = member_field(i, suffix)
                existing = self.fields.get(name)
                value = existing.value if existing else self._pending.pop(name, "")
                self._add_field(name, kind, readonly=is_leader, value=value)
                names.append(name)
            blocks.append(MemberBlock(index=i, is_leader=is_leader, fields=names))
        self.member_blocks = blocks
        self.fill_leader_data()
        return blocks

    def fill_leader_data(self):
        if not self.fields[leader_field("Names")].value:
            return
        for suffix, _, _ in PERSON_FIELDS:
            target = self.fields.get(member_field(1, suffix))
            if target is not None:
                target.value = self.fields[leader_field(suffix)].value

    # ── Summary & payload ──────────────────────────────────────────────

    def _person(self, index: int) -> Dict[str, str]:
        return {key: self.fields[member_field(index, suffix)].value.strip()
                for suffix, _, key in PERSON_FIELDS}

    def confirmation_summary(self) -> Dict[str, Any]:
        category = self.fields["category"].value
        return {
            "teamName": self.fields["teamName"].value.strip(),
            "category": CATEGORIES.get(category, category),
            "teamSize": self.team_size,
            "members": [
                dict(self._person(block.index), is_leader=block.is_leader)
                for block in self.member_blocks
            ],
        }

    def collect_payload(self) -> Dict[str, Any]:
        category = self.fields["category"].value
        members = []
        for block in self.member_blocks:
            person = self._person(block.index)
            person["phone"] = rules.normalize_phone(person["phone"])
            person["utp_code"] = person["utp_code"].upper()
            members.append(person)
        return {
            "team": {
                "name": self.fields["teamName"].value.strip(),
                "amount": self.team_size,
                "description": CATEGORIES.get(category, category),
            },
            "members": members,
        }

    # ── Draft ──────────────────────────────────────────────────────────

    def save_draft(self):
        values = dict(self._pending)
        values.update({name: f.value for name, f in self.fields.items()})
        self._draft.save(values, self.current_step, self.team_size)

    def load_draft(self):
        data = self._draft.load()
        if not data:
            return
        for key, value in data.items():
            if key in (STEP_KEY, SIZE_KEY):
                continue
            if key in self.fields:
                self.fields[key].value = str(value)
            elif key.startswith("member"):
                self._pending[key] = str(value)
        if data.get(SIZE_KEY):
            self.set_team_size(data[SIZE_KEY])

    def clear_draft(self):
        self._draft.clear()

    def reset(self):
        self.clear_draft()
        self._pending.clear()
        self.fields = {n: f for n, f in self.fields.items() if not n.startswith("member")}
        for f in self.fields.values():
            f.value = ""
            f.error = ""
        self.team_size = 0
        self.member_blocks = []
        self.summary = None
        self.current_step = STEP_TEAM

    # ── Submission ─────────────────────────────────────────────────────

    async def submit(self, token: str) -> bool:
        if self.busy or self.current_step != TOTAL_STEPS:
            return False
        if self._client is None:
            raise RuntimeError("no registration client configured")

        self.busy = True
        self.submit_error = None
        try:
            result = await self._client.submit(self.collect_payload(), token)
        except SubmissionError as exc:
            logger.warning("Registration submit failed: %s", exc)
            self.submit_error = GENERIC_SUBMIT_ERROR
            return False
        finally:
            self.busy = False

        self.confirmation_id = result["teamId"]
        self.clear_draft()
        return True
