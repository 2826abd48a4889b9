# tests/core/test_tokenizer.py
import pytest

from sh61_shell.core.tokenizer import ShellTokenizer, TokenType, tokenize, type_name

N = TokenType.NORMAL


def types(line, extended=True):
    return [t.type for t in tokenize(line, extended)]


def texts(line, extended=True):
    return [t.str() for t in tokenize(line, extended)]


def test_simple_words_and_pipe():
    assert types("echo hi | wc") == [N, N, TokenType.PIPE, N]
    assert texts("echo hi | wc") == ["echo", "hi", "|", "wc"]


def test_operators_match_longest_first():
    line = "a&&b||c&d;e|f"
    assert types(line) == [
        N, TokenType.AND, N, TokenType.OR, N, TokenType.BACKGROUND,
        N, TokenType.SEQUENCE, N, TokenType.PIPE, N,
    ]
    assert texts(line)[1::2] == ["&&", "||", "&", ";", "|"]


def test_quote_splicing_makes_one_word():
    tokens = tokenize('foo"bar baz"qux')
    assert len(tokens) == 1
    assert tokens[0].type == N
    assert tokens[0].quoted
    assert tokens[0].str() == "foobar bazqux"
    assert tokens[0].raw == 'foo"bar baz"qux'


def test_single_quotes_hide_operators():
    assert texts("echo 'a;b|c' done") == ["echo", "a;b|c", "done"]


def test_escapes_are_kept_verbatim():
    assert texts(r'echo "a\"b"') == ["echo", r"a\"b"]
    assert texts(r"echo a\ b\;c") == ["echo", r"a\ b\;c"]


def test_unterminated_quote_runs_to_end():
    tokens = tokenize('echo "abc def')
    assert [t.type for t in tokens] == [N, N]
    assert tokens[1].raw == '"abc def'
    assert tokens[1].str() == "abc def"


@pytest.mark.parametrize("line, expected, redirects", [
    ("cat<in>>out", ["cat", "<", "in", ">>", "out"], ["<", ">>"]),
    ("ls 2> err.log", ["ls", "2>", "err.log"], ["2>"]),
    ("cmd 10>>log", ["cmd", "10>>", "log"], ["10>>"]),
    ("echo 123 x2>y", ["echo", "123", "x2", ">", "y"], [">"]),
])
def test_redirection_operators(line, expected, redirects):
    assert texts(line) == expected
    assert [t.raw for t in tokenize(line) if t.type == TokenType.REDIRECT_OP] == redirects


def test_parentheses_depend_on_extended_syntax():
    assert types("(a)") == [TokenType.LPAREN, N, TokenType.RPAREN]
    assert types("(a)", extended=False) == [TokenType.OTHER, N, TokenType.OTHER]


def test_newline_is_an_eol_token():
    assert types("a\nb") == [N, TokenType.EOL, N]


def test_malformed_input_never_raises():
    assert types("echo >") == [N, TokenType.REDIRECT_OP]
    assert types("|| &&") == [TokenType.OR, TokenType.AND]
    assert tokenize("") == []
    assert tokenize("   \t ") == []


def test_tokens_and_whitespace_reconstruct_the_buffer():
    line = "  cat <in.txt 'a b'|  grep  \"x\"y && echo 2>>e ; (ls)&\n"
    pieces = []
    prev = 0
    for token in tokenize(line):
        gap = line[prev:token.start]
        assert gap.strip(" \t") == ""
        pieces.append(gap)
        pieces.append(token.raw)
        prev = token.stop
    pieces.append(line[prev:])
    assert "".join(pieces) == line


def test_tokenizing_is_deterministic():
    line = "a | b && 'c d' > e"
    assert tokenize(line) == tokenize(line)


def test_cursor_advances_to_exhaustion():
    tok = ShellTokenizer("a | b")
    assert tok and not tok.empty()
    assert (tok.type(), tok.str()) == (N, "a")
    tok = tok.advance()
    assert tok.type() == TokenType.PIPE
    assert tok.type_name() == "pipe"
    tok = tok.advance()
    assert tok.str() == "b"
    tok = tok.advance()
    assert tok.empty()
    assert tok.type() == TokenType.EOL
    assert tok.advance() == tok


def test_cursor_respects_range_bounds():
    line = "skip this | keep"
    tok = ShellTokenizer(line, line.index("keep"))
    assert [t.str() for t in tok] == ["keep"]
    assert [t.str() for t in ShellTokenizer(line, 0, 4)] == ["skip"]


def test_type_names():
    assert type_name(TokenType.AND) == "and"
    assert type_name(TokenType.REDIRECT_OP) == "redirection"
    assert type_name(TokenType.OTHER) == "other"
    assert type_name(42) == "unknown"
