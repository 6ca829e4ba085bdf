"""Signals the duel server encodes in free-form message text.

The battle server never says whose turn it is or what the current range
is in structured fields; both live inside the human-readable message
("Valid range: 12-60. It's your turn"). Each server language has its own
PhraseSet with the exact trigger phrases and the range pattern it uses,
along with the client's own strings for that language.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple

from .protocol import DuelHints


@dataclass(frozen=True)
class PhraseSet:
    """Trigger phrases and UI strings for one language."""
    language: str

    # Protocol signals
    start_turn_phrases: Tuple[str, ...]   # checked on start
    update_turn_phrases: Tuple[str, ...]  # checked on update
    range_pattern: Pattern[str]
    win_phrases: Tuple[str, ...]
    lose_phrases: Tuple[str, ...]

    # Client strings
    finding_opponent: str
    matchmaking_failed: str
    connection_lost: str
    connection_error: str
    message_error: str
    guess_prompt: str
    not_your_turn: str
    range_format: str
    hint_labels: Dict[str, str]
    labels: Dict[str, str]

    def is_local_turn(self, text: str, starting: bool = False) -> bool:
        """True if the message text says it is this player's turn.

        ``starting`` selects the phrases of the duel's opening message;
        otherwise those of a turn update.
        """
        phrases = self.start_turn_phrases if starting else self.update_turn_phrases
        return any(phrase in text for phrase in phrases)

    def extract_range(self, text: str) -> Optional[Tuple[int, int]]:
        """Return (low, high) if the text announces a range, else None."""
        match = self.range_pattern.search(text)
        if not match:
            return None
        return int(match.group(1)), int(match.group(2))

    def result_tone(self, text: str) -> str:
        """Classify an end-of-duel message as 'win', 'lose' or 'info'."""
        if any(phrase in text for phrase in self.win_phrases):
            return 'win'
        if any(phrase in text for phrase in self.lose_phrases):
            return 'lose'
        return 'info'

    def format_range(self, low: int, high: int) -> str:
        return self.range_format.format(low=low, high=high)

    def format_hints(self, hints: DuelHints) -> str:
        """Render revealed hints as one line, e.g. 'Hints: even, digit sum 7'."""
        parts = []
        if hints.is_even is not None:
            parts.append(self.hint_labels['even' if hints.is_even else 'odd'])
        if hints.digit_sum is not None:
            parts.append(self.hint_labels['sum'].format(sum=hints.digit_sum))
        if hints.is_prime is not None:
            parts.append(self.hint_labels['prime' if hints.is_prime else 'not_prime'])
        if not parts:
            return ""
        return self.hint_labels['prefix'] + self.hint_labels['separator'].join(parts)


ENGLISH = PhraseSet(
    language='en',
    start_turn_phrases=("your turn",),
    update_turn_phrases=("your turn",),
    range_pattern=re.compile(r"range: (\d+)-(\d+)"),
    win_phrases=("You win",),
    lose_phrases=("You lose",),
    finding_opponent="Finding opponent...",
    matchmaking_failed="Matchmaking failed, please try again",
    connection_lost="Connection lost, please try again",
    connection_error="Connection error, please try again",
    message_error="Message processing error",
    guess_prompt="Please enter a number between 1 and 100",
    not_your_turn="Wait for your turn",
    range_format="Valid range: {low}-{high}",
    hint_labels={
        'prefix': "Hints: ",
        'separator': ", ",
        'even': "even",
        'odd': "odd",
        'sum': "digit sum {sum}",
        'prime': "prime",
        'not_prime': "not prime",
    },
    labels={
        'title': "Guess Duel",
        'server': "Lobby server",
        'save': "Save",
        'find': "Find Opponent",
        'guess': "Guess",
        'saved': "Server address saved",
    },
)

CHINESE = PhraseSet(
    language='zh',
    start_turn_phrases=("你是先手",),
    update_turn_phrases=("轮到你猜测",),
    range_pattern=re.compile(r"范围：(\d+)-(\d+)"),
    win_phrases=("你赢了", "你获胜"),
    lose_phrases=("你输了",),
    finding_opponent="正在匹配玩家...",
    matchmaking_failed="匹配失败，请重试",
    connection_lost="连接已断开，请重试",
    connection_error="连接错误，请重试",
    message_error="消息处理错误",
    guess_prompt="请输入1-100之间的数字",
    not_your_turn="请等待你的回合",
    range_format="可猜测范围：{low}-{high}",
    hint_labels={
        'prefix': "提示：",
        'separator': "，",
        'even': "偶数",
        'odd': "奇数",
        'sum': "各位数字之和为{sum}",
        'prime': "质数",
        'not_prime': "非质数",
    },
    labels={
        'title': "猜数字对决",
        'server': "大厅服务器",
        'save': "保存",
        'find': "开始匹配",
        'guess': "猜测",
        'saved': "服务器地址已保存",
    },
)

PHRASE_SETS = {
    ENGLISH.language: ENGLISH,
    CHINESE.language: CHINESE,
}


def get_phrase_set(language: str) -> PhraseSet:
    """Phrase set for a language code, English if unknown."""
    return PHRASE_SETS.get(language, ENGLISH)
