"""
Similarity Scorer

Edit-distance closeness between a decoded answer and the target word.
Used for feedback and analytics only, never for correctness.
"""

from services.spelling.decoding import normalize_answer
from services.spelling.models import AnswerAnalysis

# Percentage of positional matches at which an answer counts as "close"
CLOSE_ANSWER_PERCENT = 80


def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Minimum single-character edits turning s1 into s2.
    
    Args:
        s1: First string
        s2: Second string
        
    Returns:
        Edit distance
    """
    if s1 == s2:
        return 0
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)
    
    # Two rolling rows of the distance matrix
    previous = list(range(len(s2) + 1))
    
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            if c1 == c2:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    
    return previous[-1]


def calculate_similarity(s1: str, s2: str) -> float:
    """
    Normalized similarity in [0, 1].
    
    1.0 for identical strings, 0.0 when either side is empty.
    
    Example:
        calculate_similarity("cat", "cat")  # 1.0
        calculate_similarity("cat", "cot")  # 0.667
    """
    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0
    
    distance = levenshtein_distance(s1, s2)
    return 1 - (distance / max(len(s1), len(s2)))


def analyze_answer(player_answer: str, correct_word: str) -> AnswerAnalysis:
    """
    Count letters in the right position for player feedback.
    
    Args:
        player_answer: What the player spelled (raw or decoded)
        correct_word: Target word
        
    Returns:
        AnswerAnalysis with the positional breakdown
    """
    answer = normalize_answer(player_answer)
    correct = normalize_answer(correct_word)
    
    correct_letters = sum(1 for a, c in zip(answer, correct) if a == c)
    total_letters = len(correct)
    
    if total_letters:
        # Half-up rounding
        percentage = int(correct_letters * 100 / total_letters + 0.5)
    else:
        percentage = 0
    
    return AnswerAnalysis(
        correct_letters=correct_letters,
        total_letters=total_letters,
        percentage_correct=percentage,
        was_close=percentage >= CLOSE_ANSWER_PERCENT,
    )
