# LedgerApp/app/services/chart_of_accounts.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

import LedgerApp.app.common as common
from LedgerApp.app.services.records import AccountRecord, HEADER


# --- Code format: 4 segments x 3 digits, dash-joined ---
SEGMENTS = 4
SEGMENT_WIDTH = 3
CODE_DIGITS = SEGMENTS * SEGMENT_WIDTH
ZERO_SEGMENT = "0" * SEGMENT_WIDTH

_NON_DIGITS = re.compile(r"[^0-9]")
_MALFORMED = re.compile(r"[^0-9\-\s]")


class Rubro(str, Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    COST = "COST"
    EXPENSE = "EXPENSE"
    OTHER = "OTHER"


RUBRO_ORDER = [
    Rubro.ASSET,
    Rubro.LIABILITY,
    Rubro.EQUITY,
    Rubro.REVENUE,
    Rubro.COST,
    Rubro.EXPENSE,
    Rubro.OTHER,
]

LEADING_DIGIT_TO_RUBRO = {
    "1": Rubro.ASSET,
    "2": Rubro.LIABILITY,
    "3": Rubro.EQUITY,
    "4": Rubro.REVENUE,
    "5": Rubro.COST,
    "6": Rubro.EXPENSE,
    "7": Rubro.OTHER,
}

# Used only when an account carries no explicit nature
DEBIT_NORMAL_DIGITS = ("1", "5", "6")

DEBIT_NATURES = ("debit", "debit-normal", "deudora")
CREDIT_NATURES = ("credit", "credit-normal", "acreedora")


def _digits(raw) -> str:
    clean = _NON_DIGITS.sub("", str(raw or ""))
    return clean[:CODE_DIGITS].ljust(CODE_DIGITS, "0")


def _segments(code) -> List[str]:
    d = _digits(code)
    return [d[i:i + SEGMENT_WIDTH] for i in range(0, CODE_DIGITS, SEGMENT_WIDTH)]


def normalize_code(raw) -> str:
    """
    '100' -> '100-000-000-000', '1.1.1' -> '111-000-000-000'.
    Never fails: anything without digits becomes all zeros.
    """
    normalized = "-".join(_segments(raw))
    text = str(raw or "")
    if _MALFORMED.search(text) or len(_NON_DIGITS.sub("", text)) > CODE_DIGITS:
        common.logger.debug(f"Malformed account code {raw!r} normalized to {normalized}")
    return normalized


def format_code_partial(raw) -> str:
    """Group up to 12 typed digits with dashes, without padding ('10000' -> '100-00')."""
    clean = _NON_DIGITS.sub("", str(raw or ""))[:CODE_DIGITS]
    return "-".join(clean[i:i + SEGMENT_WIDTH] for i in range(0, len(clean), SEGMENT_WIDTH))


def derive_level(code) -> int:
    segs = _segments(code)
    # deepest non-zero segment decides the level; level 1 even for all zeros
    for level in range(SEGMENTS, 1, -1):
        if segs[level - 1] != ZERO_SEGMENT:
            return level
    return 1


def derive_parent_code(code) -> Optional[str]:
    level = derive_level(code)
    if level == 1:
        return None
    segs = _segments(code)
    segs[level - 1] = ZERO_SEGMENT
    return "-".join(segs)


def suggest_next_child_code(parent_code, existing_codes: Iterable[str]) -> Optional[str]:
    """
    Next free child code one level below parent_code.

    Only codes that match the parent's prefix, have a non-zero segment at the
    child depth and zeros beyond it count as siblings, so grandchildren are
    never mistaken for children. Returns None for level-4 parents (the code
    format has no fifth segment) and when the 999 slots are exhausted.
    """
    parent_level = derive_level(parent_code)
    if parent_level >= SEGMENTS:
        common.logger.warning(f"No child level below {normalize_code(parent_code)}")
        return None

    parent_segs = _segments(parent_code)
    prefix = parent_segs[:parent_level]
    child_idx = parent_level  # zero-based index of the child segment

    max_num = 0
    for code in existing_codes:
        segs = _segments(code)
        if segs[:parent_level] != prefix:
            continue
        if segs[child_idx] == ZERO_SEGMENT:
            continue
        if any(s != ZERO_SEGMENT for s in segs[child_idx + 1:]):
            continue
        max_num = max(max_num, int(segs[child_idx]))

    if max_num >= 10 ** SEGMENT_WIDTH - 1:
        common.logger.warning(f"Child codes exhausted under {normalize_code(parent_code)}")
        return None

    child = prefix + [str(max_num + 1).zfill(SEGMENT_WIDTH)]
    child += [ZERO_SEGMENT] * (SEGMENTS - len(child))
    return "-".join(child)


def classify_rubro(code) -> Rubro:
    return LEADING_DIGIT_TO_RUBRO.get(_digits(code)[0], Rubro.OTHER)


def is_debit_normal(account) -> bool:
    """
    The one place that decides the sign convention of an account.

    Prefers the explicit nature ('debit'/'credit'); falls back to the leading
    digit of the code (1, 5, 6 are debit-normal) only when nature is missing.
    Accepts anything with `nature` and/or `code` attributes, including None.
    """
    nature = (getattr(account, "nature", None) or "").strip().lower()
    if nature in DEBIT_NATURES:
        return True
    if nature in CREDIT_NATURES:
        return False
    if nature:
        common.logger.debug(f"Unrecognised account nature {nature!r}, using the code prefix")
    return _digits(getattr(account, "code", ""))[0] in DEBIT_NORMAL_DIGITS


# --- Arena of accounts indexed by normalized code ---

@dataclass
class Node:
    code: str
    account: AccountRecord
    parent: Optional["Node"] = None
    children: Dict[str, "Node"] = field(default_factory=dict)

    @property
    def level(self) -> int:
        return derive_level(self.code)


@dataclass(frozen=True)
class Anomaly:
    code: str
    kind: str      # 'duplicate_code' | 'orphan' | 'posting_with_children'
    message: str


class ChartOfAccounts:
    """
    Chart of accounts built once from account records.

    Levels, parents and children are derived here and nowhere else.
    An account whose direct parent code is missing hangs off its nearest
    existing ancestor and is reported by anomalies().
    """

    def __init__(self, accounts: Iterable[AccountRecord]):
        self._nodes: Dict[str, Node] = {}
        self._by_id: Dict[int, Node] = {}
        self._anomalies: List[Anomaly] = []

        for account in accounts:
            code = normalize_code(account.code)
            node = Node(code, account)
            if code in self._nodes:
                # first account keeps the slot in the tree
                self._anomalies.append(Anomaly(code, "duplicate_code", f"Code {code} used by more than one account"))
            else:
                self._nodes[code] = node
            self._by_id[account.id] = node

        for code in sorted(self._nodes):
            node = self._nodes[code]
            parent_code = derive_parent_code(code)
            if parent_code is None:
                continue
            if parent_code not in self._nodes:
                self._anomalies.append(Anomaly(code, "orphan", f"Parent {parent_code} of {code} does not exist"))
            # walk up to the nearest existing ancestor
            while parent_code is not None and parent_code not in self._nodes:
                parent_code = derive_parent_code(parent_code)
            if parent_code is not None:
                parent = self._nodes[parent_code]
                node.parent = parent
                parent.children[code] = node

        for code in sorted(self._nodes):
            node = self._nodes[code]
            if node.children and not node.account.is_header:
                self._anomalies.append(Anomaly(code, "posting_with_children", f"Posting account {code} has child accounts"))

        for anomaly in self._anomalies:
            common.logger.debug(f"Chart of accounts anomaly: {anomaly.message}")

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, code) -> bool:
        return normalize_code(code) in self._nodes

    def __iter__(self) -> Iterator[AccountRecord]:
        for code in sorted(self._nodes):
            yield self._nodes[code].account

    def accounts(self) -> List[AccountRecord]:
        """Every registered account, duplicates included, ordered by code."""
        nodes = sorted(self._by_id.values(), key=lambda n: (n.code, n.account.id))
        return [n.account for n in nodes]

    def get(self, code) -> Optional[AccountRecord]:
        node = self._nodes.get(normalize_code(code))
        return node.account if node else None

    def by_id(self, account_id) -> Optional[AccountRecord]:
        node = self._by_id.get(account_id)
        return node.account if node else None

    def code_of(self, account_id) -> Optional[str]:
        node = self._by_id.get(account_id)
        return node.code if node else None

    def level(self, code) -> int:
        return derive_level(code)

    def parent(self, code) -> Optional[AccountRecord]:
        node = self._nodes.get(normalize_code(code))
        if node is None or node.parent is None:
            return None
        return node.parent.account

    def children(self, code) -> List[AccountRecord]:
        node = self._nodes.get(normalize_code(code))
        if node is None:
            return []
        return [node.children[k].account for k in sorted(node.children)]

    def ancestors(self, code) -> List[AccountRecord]:
        node = self._nodes.get(normalize_code(code))
        out: List[AccountRecord] = []
        while node is not None and node.parent is not None:
            node = node.parent
            out.append(node.account)
        return out

    def descendants(self, code) -> List[AccountRecord]:
        node = self._nodes.get(normalize_code(code))
        if node is None:
            return []
        out: List[AccountRecord] = []
        stack = [node.children[k] for k in sorted(node.children, reverse=True)]
        while stack:
            cur = stack.pop()
            out.append(cur.account)
            stack.extend(cur.children[k] for k in sorted(cur.children, reverse=True))
        return out

    def roots(self) -> List[AccountRecord]:
        return [self._nodes[c].account for c in sorted(self._nodes) if self._nodes[c].parent is None]

    def anomalies(self) -> List[Anomaly]:
        return list(self._anomalies)


def chart_of(accounts) -> ChartOfAccounts:
    """Accept an existing ChartOfAccounts or any iterable of AccountRecord."""
    if isinstance(accounts, ChartOfAccounts):
        return accounts
    return ChartOfAccounts(accounts)


def is_header(account) -> bool:
    return getattr(account, "classification", None) == HEADER
