"""Regex patterns used to split raw text lines into words before counting."""

# Characters that are dropped from words altogether. `#` starts a comment in merge
# files, so no symbol may begin with it
DROPPED_PATTERN = r"""["(){}\[\]\t#]"""

# Sentence punctuation, emitted as words of their own
PUNCTUATION_PATTERN = r"[.?!,:;]"

# Any decimal digit
DIGIT_PATTERN = r"\p{Nd}"

# Placeholder that replaces every digit when digits are collapsed
DIGIT_PLACEHOLDER = "@"

# Words of a whitespace-free chunk when each digit stands on its own: a digit, a
# punctuation mark, or a run of anything else
DIGIT_SPLIT_PATTERN = (
    rf"{DIGIT_PATTERN}|{PUNCTUATION_PATTERN}"
    rf"|(?:(?!{DIGIT_PATTERN}|{PUNCTUATION_PATTERN})\S)+"
)

# Same, with digits kept inside words
WORD_SPLIT_PATTERN = rf"{PUNCTUATION_PATTERN}|(?:(?!{PUNCTUATION_PATTERN})\S)+"

# Clitic pieces: everything up to and including an apostrophe, or the remainder
CLITIC_PATTERN = r"[^']*'|[^']+"
