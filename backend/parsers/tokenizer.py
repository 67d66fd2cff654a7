"""
Whitespace tokenizer for 2DA lines

Splits a line into tokens and tracks the visual column each token starts at,
so the serializer can put values back where they were found.
"""

from typing import List, NamedTuple

TAB_WIDTH = 8


class Token(NamedTuple):
    """A token and the visual column it starts at"""
    text: str
    start: int


class TokenizedLine(NamedTuple):
    tokens: List[Token]
    visual_length: int

    @property
    def texts(self) -> List[str]:
        return [token.text for token in self.tokens]


def tokenize(line: str) -> List[str]:
    """
    Split a line into tokens.

    Double quotes toggle a quoted state in which whitespace does not split.
    Quote characters are kept in the token text; an unterminated quote simply
    runs to the end of the line.
    """
    return tokenize_with_positions(line).texts


def tokenize_with_positions(line: str) -> TokenizedLine:
    """
    Split a line into tokens, recording each token's visual start column.

    Tabs advance to the next multiple of TAB_WIDTH, every other character
    advances by one. The returned visual length is the column reached after
    the last character, trailing whitespace included.
    """
    tokens: List[Token] = []
    current: List[str] = []
    in_quotes = False
    token_start = -1
    visual_index = 0

    for char in line:
        if char == '"':
            if not current:
                token_start = visual_index
            current.append(char)
            in_quotes = not in_quotes
            visual_index += 1
            continue

        if not in_quotes and char.isspace():
            if current:
                tokens.append(Token(''.join(current), token_start))
                current = []
                token_start = -1

            if char == '\t':
                visual_index = (visual_index // TAB_WIDTH + 1) * TAB_WIDTH
            else:
                visual_index += 1
            continue

        if not current:
            token_start = visual_index
        current.append(char)
        visual_index += 1

    if current:
        tokens.append(Token(''.join(current), token_start))

    return TokenizedLine(tokens, visual_index)


def token_width(tokens: List[Token], index: int) -> int:
    """
    Width a token occupies on its line: the distance to the next token's
    start, or at least the token's own length. The last token is as wide as
    its text.
    """
    if index < 0 or index >= len(tokens):
        return 0

    if index + 1 < len(tokens):
        return max(tokens[index + 1].start - tokens[index].start, len(tokens[index].text))

    return len(tokens[index].text)
