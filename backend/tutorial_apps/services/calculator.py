"""Key-press model for the four-function calculator."""

from fractions import Fraction

ERROR_DISPLAY = 'Error'
DIGIT_KEYS = set('0123456789')
OPERATOR_KEYS = {'+', '-', 'X', '/'}
CLEAR_KEY = 'C'
ENTER_KEYS = {'=', 'ENTER'}


class CalculatorError(ValueError):
    pass


def press(display, key):
    """Return the display text after pressing ``key``."""
    display = display or ''
    key = (key or '').strip().upper()
    if display == ERROR_DISPLAY:
        display = ''
    if key in DIGIT_KEYS or key in OPERATOR_KEYS:
        return display + key
    if key == CLEAR_KEY:
        return display[:-1]
    if key in ENTER_KEYS:
        if not display:
            return display
        try:
            return format_number(evaluate(display))
        except CalculatorError:
            return ERROR_DISPLAY
    raise CalculatorError(f"Unknown key: {key!r}")


def _tokenize(expression):
    tokens = []
    number = ''
    for index, char in enumerate(expression):
        if char in DIGIT_KEYS:
            number += char
            continue
        if char not in OPERATOR_KEYS:
            raise CalculatorError(f"Unexpected character {char!r}")
        # A leading minus, or one right after an operator, negates the next number
        if char == '-' and not number and (not tokens or tokens[-1] in OPERATOR_KEYS) and index + 1 < len(expression):
            number = '-'
            continue
        if not number or number == '-':
            raise CalculatorError("Operator without a left operand")
        tokens.append(_operand(number))
        tokens.append(char)
        number = ''
    if not number or number == '-':
        raise CalculatorError("Expression ends with an operator")
    tokens.append(_operand(number))
    return tokens


def _operand(number):
    try:
        return Fraction(int(number))
    except ValueError as exc:
        # int() refuses digit strings past the interpreter's conversion limit
        raise CalculatorError("Number is too long") from exc


def _apply(operator, left, right):
    if operator == '+':
        return left + right
    if operator == '-':
        return left - right
    if operator == 'X':
        return left * right
    if right == 0:
        raise CalculatorError("Division by zero")
    return left / right


def evaluate(expression):
    """Evaluate with multiply/divide binding tighter than add/subtract."""
    tokens = _tokenize(expression)
    # First pass folds X and /, second pass folds + and -
    folded = [tokens[0]]
    for i in range(1, len(tokens), 2):
        operator, operand = tokens[i], tokens[i + 1]
        if operator in ('X', '/'):
            folded[-1] = _apply(operator, folded[-1], operand)
        else:
            folded.extend([operator, operand])
    result = folded[0]
    for i in range(1, len(folded), 2):
        result = _apply(folded[i], result, folded[i + 1])
    return result


def format_number(value):
    try:
        if value.denominator == 1:
            return str(value.numerator)
        text = f"{float(value):.10f}".rstrip('0').rstrip('.')
    except (ValueError, OverflowError) as exc:
        raise CalculatorError("Result is too large to display") from exc
    return text
