#!/usr/bin/env python3
"""
Mordle — guess one or more secret words at once, right in the terminal.
Features:
- Any word length, any number of simultaneous words (columns)
- Colored hints: green (correct), yellow (wrong position), plain (not in word)
- Per-column letter key showing everything learned so far about each secret
- Words come from a system dictionary file (e.g. /usr/share/dict/words)
- Type a word and press enter to guess, Ctrl-D to give up
"""

import argparse
import collections
import curses
import os
import random
import sys
from bisect import bisect_left
from dataclasses import dataclass
from typing import Optional

# ---------------------------------------------------------------------------
# Program defaults
# ---------------------------------------------------------------------------
PROGRAM_NAME = "mordle"
VERSION = "0.1.0"

DEFAULT_DICT_PATH = "/usr/share/dict:/usr/dict"
DEFAULT_DICT = "words"
DEFAULT_CHARS = 5
DEFAULT_WORDS = 1

YES_VALUES = ("y", "yes", "true")
NO_VALUES = ("n", "no", "false")
COLOR_MODES = ("auto", "always", "never")

# ---------------------------------------------------------------------------
# Letter states and display styles
# ---------------------------------------------------------------------------
PERFECT = "perfect"
MISPLACED = "misplaced"
ABSENT = "absent"

STYLE_PERFECT = "perfect"
STYLE_MISPLACED = "misplaced"
STYLE_WRONG = "wrong"
STYLE_REGULAR = "regular"

# Absent letters in the guess grid are shown plain; only the key marks
# eliminated letters as wrong.
HINT_STYLES = {
    PERFECT: STYLE_PERFECT,
    MISPLACED: STYLE_MISPLACED,
    ABSENT: STYLE_REGULAR,
}

# ANSI escape codes
RESET = "\033[0m"
BLACK_FG = "\033[30m"
WRONG_BG = "\033[41m"      # red
MISPLACED_BG = "\033[43m"  # yellow
PERFECT_BG = "\033[42m"    # green

STYLE_BACKGROUNDS = {
    STYLE_PERFECT: PERFECT_BG,
    STYLE_MISPLACED: MISPLACED_BG,
    STYLE_WRONG: WRONG_BG,
}


class InvalidConfigurationError(ValueError):
    """Game options or secrets that no game can be played with."""


class DictionaryNotFoundError(FileNotFoundError):
    """No dictionary file with the requested name in the search path."""


def paint_plain(letter, style):
    """Render a letter without any decoration."""
    return letter


def paint_ansi(letter, style):
    """Render a letter as black on the background color of its style."""
    background = STYLE_BACKGROUNDS.get(style)
    if background is None:
        return letter
    return f"{background}{BLACK_FG}{letter}{RESET}"


def supports_color(stream):
    """Return True if *stream* is a terminal that can show 8 colors."""
    if not stream.isatty():
        return False
    try:
        curses.setupterm(fd=stream.fileno())
    except curses.error:
        return False
    return curses.tigetnum("colors") >= 8


def choose_painter(color, stream):
    """Pick the painter for a --color mode ('auto', 'always' or 'never')."""
    if color == "always":
        return paint_ansi
    if color == "auto" and supports_color(stream):
        return paint_ansi
    return paint_plain


# ---------------------------------------------------------------------------
# Bitfield: positions of a secret where a letter is confirmed
# ---------------------------------------------------------------------------
class Bitfield:
    """A small set of position indices packed into an int."""

    __slots__ = ("bits",)

    def __init__(self, bits=0):
        self.bits = bits

    def set(self, index, bit=True):
        if bit:
            self.bits |= 1 << index
        else:
            self.bits &= ~(1 << index)
        return self

    def get(self, index):
        return self.bits & (1 << index) != 0

    def ones(self):
        """Number of positions in the set."""
        return bin(self.bits).count("1")

    def __bool__(self):
        return self.bits != 0

    def __eq__(self, other):
        if isinstance(other, Bitfield):
            return self.bits == other.bits
        return NotImplemented

    def __repr__(self):
        return f"Bitfield({self.bits:#b})"


# ---------------------------------------------------------------------------
# Hint generation (pure game logic)
# ---------------------------------------------------------------------------
def evaluate_guess(guess, secret):
    """Evaluate a guess against one secret.

    Returns (result, solved) where result holds one of PERFECT, MISPLACED
    or ABSENT per position. Exact matches consume the secret's letter
    budget before any misplaced letter does, so a letter occurring k times
    in the secret is never reported more than k times.
    """
    if len(guess) != len(secret):
        raise InvalidConfigurationError(
            f"guess length ({len(guess)}) != secret length ({len(secret)})")

    remaining = collections.Counter(secret)
    result = [ABSENT] * len(guess)
    solved = True

    # First pass: exact matches
    for i, (letter, wanted) in enumerate(zip(guess, secret)):
        if letter == wanted:
            result[i] = PERFECT
            remaining[letter] -= 1
        else:
            solved = False

    # Second pass: misplaced letters, left to right, while budget remains
    for i, letter in enumerate(guess):
        if result[i] == PERFECT:
            continue
        if remaining[letter] > 0:
            result[i] = MISPLACED
            remaining[letter] -= 1

    return result, solved


def format_hint(guess, result, paint=paint_plain):
    """Render a guess with each letter in the style of its state."""
    return "".join(paint(letter, HINT_STYLES[state])
                   for letter, state in zip(guess, result))


def check_win(result):
    """Return True if all letters are perfect."""
    return all(state == PERFECT for state in result)


def empty_word(chars):
    """Placeholder shown for rounds without a hint."""
    return "." * chars


# ---------------------------------------------------------------------------
# Column state: what is known about one secret
# ---------------------------------------------------------------------------
class ColumnState:
    """Running letter knowledge about a single secret.

    perfect maps a letter to the Bitfield of positions it was confirmed at,
    contained maps a letter to the most occurrences ever confirmed in one
    round (perfect ones included), absent holds letters known to be missing.
    """

    def __init__(self, chars, max_guesses):
        self.chars = chars
        self.perfect = {}
        self.contained = {}
        self.absent = set()
        self.solved = False
        self.hints = [empty_word(chars)] * max_guesses

    def play(self, round_index, guess, secret, paint=paint_plain):
        """Play one round on this column and return the letter states.

        A solved column is frozen: its hint stays blank and None is returned.
        """
        if self.solved:
            return None

        result, solved = evaluate_guess(guess, secret)
        self.hints[round_index] = format_hint(guess, result, paint)
        if solved:
            self.solved = True
        else:
            self.update(guess, result)
        return result

    def update(self, guess, result):
        """Fold one round's letter states into the column's knowledge."""
        temp_contained = {}
        for i, (letter, state) in enumerate(zip(guess, result)):
            if state == PERFECT:
                self.perfect.setdefault(letter, Bitfield()).set(i)
                temp_contained[letter] = temp_contained.get(letter, 0) + 1
                self.absent.discard(letter)
            elif state == MISPLACED:
                temp_contained[letter] = temp_contained.get(letter, 0) + 1
                self.absent.discard(letter)
            elif (not self.perfect.get(letter) and
                  not self.contained.get(letter) and
                  not temp_contained.get(letter)):
                self.absent.add(letter)

        # Keep the best count seen in any single round, never a sum
        for letter, count in temp_contained.items():
            if count > self.contained.get(letter, 0):
                self.contained[letter] = count

    def letter_states(self, letter):
        """Return the key styles for a letter, one entry per copy shown."""
        states = []
        amount_perfect = 0
        if letter in self.perfect:
            amount_perfect = self.perfect[letter].ones()
            states.extend([STYLE_PERFECT] * amount_perfect)
        if letter in self.contained:
            # Perfect positions can come from different rounds
            misplaced = max(0, self.contained[letter] - amount_perfect)
            states.extend([STYLE_MISPLACED] * misplaced)
        if letter in self.absent:
            states.append(STYLE_WRONG)
        if not states:
            states.append(STYLE_REGULAR)
        return states


# ---------------------------------------------------------------------------
# Board rendering
# ---------------------------------------------------------------------------
def board_padding(chars):
    """Spaces on each side of a hint inside its grid cell."""
    return max(1, 6 - chars // 2)


class KeyBuilder:
    """Collects painted letters into lines of a fixed letter count."""

    def __init__(self, wrap):
        self.wrap = wrap
        self.count = 0
        self.lines = []
        self.active_line = []

    def append(self, text):
        self.active_line.append(text)
        self.count += 1
        if self.count >= self.wrap:
            self.lines.append("".join(self.active_line))
            self.active_line = []
            self.count = 0

    def append_times(self, text, amount):
        for _ in range(amount):
            self.append(text)

    def finish(self):
        """Pad the last line with spaces and return all lines."""
        if self.count != 0:
            self.active_line.append(" " * (self.wrap - self.count))
            self.lines.append("".join(self.active_line))
            self.active_line = []
            self.count = 0
        return self.lines


def render_grid(columns, chars, max_guesses):
    """Return the lines of the hint table, one row per round."""
    padding = board_padding(chars)
    cell_width = chars + 2 * padding
    rule = "-" * (len(columns) * cell_width + len(columns) + 1)
    pad = " " * padding

    lines = [rule]
    for r in range(max_guesses):
        hints = [column.hints[r] for column in columns]
        lines.append("|" + pad + (pad + "|" + pad).join(hints) + pad + "|")
    lines.append(rule)
    return lines


def render_key(columns, alphabet, chars, paint=paint_plain):
    """Return the lines of the per-column letter key.

    Solved columns are left blank, and only as many rows are produced as
    the largest unsolved column needs.
    """
    width = chars + 2 * board_padding(chars)
    displays = []
    max_rows = 0
    for column in columns:
        builder = KeyBuilder(width)
        for letter in alphabet:
            for style in column.letter_states(letter):
                builder.append(paint(letter, style))
        display = builder.finish()
        displays.append(display)
        if not column.solved and len(display) > max_rows:
            max_rows = len(display)

    blank = " " * width
    lines = []
    for r in range(max_rows):
        cells = []
        for column, display in zip(columns, displays):
            if not column.solved and r < len(display):
                cells.append(display[r])
            else:
                cells.append(blank)
        lines.append(" " + "".join(cell + " " for cell in cells))
    return lines


def render_board(columns, alphabet, chars, max_guesses, paint=paint_plain):
    """Render the hint table and the letter key as one block of text."""
    lines = render_grid(columns, chars, max_guesses)
    lines.append("")
    lines.extend(render_key(columns, alphabet, chars, paint))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Dictionary
# ---------------------------------------------------------------------------
@dataclass
class Dictionary:
    """Sorted words of one length, plus the sorted letters they use."""

    words: list
    letters: list

    def __contains__(self, word):
        i = bisect_left(self.words, word)
        return i < len(self.words) and self.words[i] == word

    def __len__(self):
        return len(self.words)


def find_dictionary(dict_path, language):
    """Return the first 'dir/language' file of a colon-separated path."""
    for directory in dict_path.split(":"):
        path = os.path.join(directory, language)
        if os.path.isfile(path):
            return path
    raise DictionaryNotFoundError(f'could not find language "{language}"')


def is_ascii_word(word):
    """True if every letter is in A-Z."""
    return all("A" <= letter <= "Z" for letter in word)


def parse_dictionary(lines, chars, force_ascii=True):
    """Build a Dictionary from raw lines, keeping words of *chars* letters.

    Words are upper-cased and duplicates are kept. With *force_ascii*,
    words with diacritics or other non A-Z characters are dropped.
    """
    words = []
    letters = set()
    for raw in lines:
        line = raw.rstrip().upper()
        if len(line) != chars:
            continue
        if force_ascii and not is_ascii_word(line):
            continue
        words.append(line)
        letters.update(line)

    words.sort()
    return Dictionary(words=words, letters=sorted(letters))


def load_dictionary(options):
    """Find and parse the dictionary named by the options."""
    path = find_dictionary(options.dict_path, options.language)
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return parse_dictionary(f, options.chars, options.force_ascii)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------
def default_guesses(words, chars):
    """Guesses allowed when --guesses is not given."""
    return 3 + words + chars // 2


@dataclass
class Options:
    """Settings for one game, usually built by parse_args()."""

    dict_path: str = DEFAULT_DICT_PATH
    language: str = DEFAULT_DICT
    chars: int = DEFAULT_CHARS
    words: int = DEFAULT_WORDS
    max_guesses: Optional[int] = None
    force_ascii: bool = True
    debug: bool = False
    seed: Optional[int] = None
    color: str = "auto"

    def __post_init__(self):
        if self.max_guesses is None:
            self.max_guesses = default_guesses(self.words, self.chars)
        self.validate()

    def validate(self):
        """Raise InvalidConfigurationError for values no game can use."""
        for name in ("chars", "words", "max_guesses"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise InvalidConfigurationError(
                    f"{name} must be a positive integer, got {value!r}")
        if self.color not in COLOR_MODES:
            raise InvalidConfigurationError(
                f"color must be one of {', '.join(COLOR_MODES)}, "
                f"got {self.color!r}")


def positive_int(text):
    """argparse type for counts that must be at least 1."""
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def yes_no(text):
    """argparse type for y/yes/true and n/no/false."""
    value = text.lower()
    if value in YES_VALUES:
        return True
    if value in NO_VALUES:
        return False
    raise argparse.ArgumentTypeError(
        "unrecognized value, use one of: " + ", ".join(YES_VALUES + NO_VALUES))


def build_parser():
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Guess one or more secret words in a limited number "
                    "of tries.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  mordle                     # one 5-letter word
  mordle -w 4                # four words at once
  mordle -c 7 -g 10          # 7-letter words, 10 guesses
  mordle -l ngerman -a no    # another dictionary, umlauts allowed
""",
    )
    parser.add_argument("-v", "--version", action="version",
                        version=f"{PROGRAM_NAME} v{VERSION}")
    parser.add_argument("--debug", action="store_true",
                        help="Show debug messages, including solutions")
    parser.add_argument("-l", "--list", dest="language", default=DEFAULT_DICT,
                        help=f'Name of the dictionary file '
                             f'(default: "{DEFAULT_DICT}")')
    parser.add_argument("-d", "--dicts", dest="dict_path",
                        default=DEFAULT_DICT_PATH,
                        help="Colon-separated list of directories in which "
                             f'to search for dictionary files '
                             f'(default: "{DEFAULT_DICT_PATH}")')
    parser.add_argument("-w", "--words", type=positive_int,
                        default=DEFAULT_WORDS,
                        help=f"Number of words to guess "
                             f"(default: {DEFAULT_WORDS})")
    parser.add_argument("-g", "--guesses", dest="max_guesses",
                        type=positive_int, default=None,
                        help="Maximum number of guesses "
                             "(default: 3 + words + chars / 2)")
    parser.add_argument("-c", "--chars", type=positive_int,
                        default=DEFAULT_CHARS,
                        help="The length (in code points) of words "
                             f"(default: {DEFAULT_CHARS})")
    parser.add_argument("-a", "--force-ascii", type=yes_no, default=True,
                        metavar="YES/NO",
                        help="Only accept dictionary words that consist "
                             "exclusively of letters in a-z and A-Z "
                             "(default: yes)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for picking the secret words")
    parser.add_argument("--color", choices=COLOR_MODES, default="auto",
                        help="Colorize hints (default: auto)")
    return parser


def parse_args(argv=None):
    """Parse command line arguments into Options."""
    args = build_parser().parse_args(argv)
    return Options(
        dict_path=args.dict_path,
        language=args.language,
        chars=args.chars,
        words=args.words,
        max_guesses=args.max_guesses,
        force_ascii=args.force_ascii,
        debug=args.debug,
        seed=args.seed,
        color=args.color,
    )


# ---------------------------------------------------------------------------
# Game
# ---------------------------------------------------------------------------
def format_words(words):
    """Show a list of words as [A B C]."""
    return "[" + " ".join(words) + "]"


class Game:
    """One game: the secrets, one ColumnState per secret, and the rounds."""

    def __init__(self, secrets, options, alphabet=(), paint=paint_plain):
        options.validate()
        secrets = list(secrets)
        if len(secrets) != options.words:
            raise InvalidConfigurationError(
                f"expected {options.words} secrets, got {len(secrets)}")
        for secret in secrets:
            if len(secret) != options.chars:
                raise InvalidConfigurationError(
                    f"secret {secret!r} is not {options.chars} letters long")

        self.secrets = secrets
        self.options = options
        self.alphabet = list(alphabet)
        self.paint = paint
        self.guesses = []
        self.round = 0
        self.solved = False
        self.aborted = False
        self.columns = [ColumnState(options.chars, options.max_guesses)
                        for _ in secrets]

    @classmethod
    def new(cls, dictionary, options, rng=None, paint=paint_plain):
        """Start a game with secrets drawn at random from *dictionary*."""
        if not dictionary.words:
            raise InvalidConfigurationError(
                f"no {options.chars}-letter words in the dictionary")
        if rng is None:
            rng = random.Random(options.seed)
        secrets = [rng.choice(dictionary.words) for _ in range(options.words)]
        return cls(secrets, options, dictionary.letters, paint)

    @property
    def over(self):
        return (self.solved or self.aborted or
                self.round >= self.options.max_guesses)

    @property
    def state(self):
        """One of 'playing', 'solved', 'exhausted' or 'aborted'."""
        if self.solved:
            return "solved"
        if self.aborted:
            return "aborted"
        if self.round >= self.options.max_guesses:
            return "exhausted"
        return "playing"

    def play(self, guess):
        """Play one round with an already validated guess.

        Returns True once every secret has been found.
        """
        if self.over:
            raise RuntimeError("Game is already over")
        if len(guess) != self.options.chars:
            raise InvalidConfigurationError(
                f"guess {guess!r} is not {self.options.chars} letters long")

        self.guesses.append(guess)
        for column, secret in zip(self.columns, self.secrets):
            column.play(self.round, guess, secret, self.paint)
        self.round += 1
        self.solved = all(column.solved for column in self.columns)
        return self.solved

    def abort(self):
        self.aborted = True

    def render(self):
        return render_board(self.columns, self.alphabet, self.options.chars,
                            self.options.max_guesses, self.paint)

    def summary(self):
        """End-of-game message."""
        if self.solved:
            return "Well done!"
        return f"The solutions were: {format_words(self.secrets)}"


# ---------------------------------------------------------------------------
# Game loop
# ---------------------------------------------------------------------------
def read_guess(game, dictionary, read_line=None, write=print):
    """Prompt until a valid guess is entered; None means end of input."""
    if read_line is None:
        read_line = input
    chars = game.options.chars
    while True:
        try:
            text = read_line("\n> ")
        except (EOFError, KeyboardInterrupt):
            return None

        guess = text.strip()
        if len(guess) != chars:
            write(f"error: guess needs to be exactly {chars} "
                  "characters long")
            continue

        guess = guess.upper()
        if guess not in dictionary:
            write(f'error: "{guess}" not in dictionary')
            continue
        return guess


def run_game(game, dictionary, read_line=None, write=print):
    """Play *game* to the end and return its final state."""
    options = game.options
    if options.debug:
        write(f"[DEBUG] the words are: {format_words(game.secrets)}\n")

    write(f"Looking for {options.words} words, with {options.chars} "
          f"letters each.\n"
          f"You have {options.max_guesses} guesses, good luck!\n")

    while not game.over:
        write(game.render())
        guess = read_guess(game, dictionary, read_line, write)
        if guess is None:
            game.abort()
            write("")
            break
        game.play(guess)

    write(game.render())
    write("\n" + game.summary())
    return game.state


def main(argv=None):
    """Command line entry point; returns the exit status."""
    options = parse_args(argv)
    try:
        dictionary = load_dictionary(options)
        paint = choose_painter(options.color, sys.stdout)
        game = Game.new(dictionary, options, paint=paint)
    except (OSError, InvalidConfigurationError) as e:
        print(f"{PROGRAM_NAME}: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print()
        return 130

    run_game(game, dictionary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
