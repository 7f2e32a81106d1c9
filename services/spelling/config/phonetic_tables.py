"""
Phonetic Tables

Static letter mappings used to decode spelled-out speech.
Keys are lowercase heard tokens, values the letters they stand for.
"""

import string

# Every letter stands for itself
SINGLE_LETTERS = {letter: letter for letter in string.ascii_lowercase}

# NATO phonetic alphabet
NATO_PHONETIC = {
    'alpha': 'a', 'alfa': 'a',
    'bravo': 'b',
    'charlie': 'c',
    'delta': 'd',
    'echo': 'e',
    'foxtrot': 'f',
    'golf': 'g',
    'hotel': 'h',
    'india': 'i',
    'juliet': 'j', 'juliett': 'j',
    'kilo': 'k',
    'lima': 'l',
    'mike': 'm',
    'november': 'n',
    'oscar': 'o',
    'papa': 'p',
    'quebec': 'q',
    'romeo': 'r',
    'sierra': 's',
    'tango': 't',
    'uniform': 'u',
    'victor': 'v',
    'whiskey': 'w', 'whisky': 'w',
    'xray': 'x', 'x-ray': 'x',
    'yankee': 'y',
    'zulu': 'z',
}

# Letter names as recognizers transcribe them, mishearings included.
# Over-inclusive on purpose: every key here is also protected from learning.
SPOKEN_LETTER_NAMES = {
    # A
    'ay': 'a', 'eh': 'a', 'aye': 'a', 'hey': 'a',
    # B
    'bee': 'b', 'be': 'b', 'bea': 'b',
    # C
    'see': 'c', 'sea': 'c', 'si': 'c', 'cee': 'c',
    # D
    'dee': 'd', 'de': 'd',
    # E
    'ee': 'e',
    # F
    'ef': 'f', 'eff': 'f',
    # G
    'gee': 'g', 'ge': 'g', 'ji': 'g',
    # H
    'aitch': 'h', 'ache': 'h', 'age': 'h', 'each': 'h', 'etch': 'h',
    # I
    'eye': 'i',
    # J
    'jay': 'j', 'je': 'j',
    # K
    'kay': 'k', 'que': 'k', 'kaye': 'k',
    # L
    'el': 'l', 'ell': 'l', 'elle': 'l',
    # M
    'em': 'm',
    # N
    'en': 'n', 'and': 'n',
    # O
    'oh': 'o', 'owe': 'o',
    # P
    'pee': 'p', 'pe': 'p',
    # Q
    'cue': 'q', 'queue': 'q', 'kew': 'q', 'cu': 'q',
    # R
    'ar': 'r', 'are': 'r', 'our': 'r',
    # S
    'es': 's', 'ess': 's', 'ass': 's',
    # T
    'tee': 't', 'te': 't', 'tea': 't',
    # U
    'you': 'u', 'yu': 'u', 'ew': 'u',
    # V
    'vee': 'v', 've': 'v', 'we': 'v',
    # W
    'double-u': 'w', 'double u': 'w', 'doubleu': 'w',
    'double you': 'w', 'doubleyou': 'w',
    # X
    'ex': 'x', 'ecks': 'x', 'eggs': 'x',
    # Y
    'why': 'y', 'wye': 'y', 'wie': 'y',
    # Z
    'zee': 'z', 'zed': 'z', 'zhe': 'z', 'the': 'z',
}

# Multi-word fragments a recognizer emits when letters are spoken quickly.
# Matched longest first so "are you in" wins over "are you".
PHRASE_FRAGMENTS = {
    # two letters
    'are you': 'ru',
    'are we': 'rv',
    'you are': 'ur',
    'you and': 'un',
    'you an': 'un',
    'see you': 'cu',
    'i see': 'ic',
    'i am': 'im',
    'you see': 'uc',
    'oh you': 'ou',
    'and i': 'ni',
    'be a': 'ba',
    'see a': 'ca',
    'see i': 'ci',
    # three letters
    'i am a': 'ima',
    'are you in': 'run',
    'are you and': 'run',
    'are you an': 'run',
    'see a tea': 'cat',
    'see ay tea': 'cat',
    'see ay t': 'cat',
    'you you an': 'uun',
    # four or more
    'are you and i': 'runi',
    'see a tea es': 'cats',
}


def get_spoken_letter_table():
    """Get letter names and phrase fragments combined."""
    table = {}
    table.update(SPOKEN_LETTER_NAMES)
    table.update(PHRASE_FRAGMENTS)
    return table
