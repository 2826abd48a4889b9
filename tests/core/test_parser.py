# tests/core/test_parser.py
from sh61_shell.core.parser import (
    CommandLineParser,
    ConditionalParser,
    PipelineParser,
)
from sh61_shell.core.tokenizer import TokenType


def strs(views):
    return [v.str().strip() for v in views]


def test_conditional_yields_pipelines_split_on_and_or():
    cond = CommandLineParser("a | b && c | d").conditional_begin()
    assert strs(cond) == ["a | b && c | d"]

    pipelines = list(cond.pipeline_begin())
    assert strs(pipelines) == ["a | b", "c | d"]
    assert pipelines[0].next_op() == TokenType.AND
    assert pipelines[1].next_op() == TokenType.EOL


def test_command_line_yields_conditionals_split_on_sequence():
    conditionals = list(CommandLineParser("a ; b && c").conditional_begin())
    assert strs(conditionals) == ["a", "b && c"]
    assert conditionals[0].next_op() == TokenType.SEQUENCE
    assert conditionals[0].next_op_name() == "sequence"


def test_pipeline_yields_commands():
    pipeline = CommandLineParser("ls -l | grep x | wc -l && true").pipeline_begin()
    assert strs(pipeline.command_begin()) == ["ls -l", "grep x", "wc -l"]


def test_pipeline_stops_at_weaker_operators():
    line = CommandLineParser("a | b ; c")
    pipeline = line.pipeline_begin()
    assert pipeline.str().strip() == "a | b"
    assert pipeline.next_op() == TokenType.SEQUENCE

    # `;` belongs to the enclosing level, so the pipeline view is exhausted.
    after = pipeline.advance()
    assert after.empty()
    assert after == pipeline.end_region()


def test_command_view_stops_at_every_control_operator():
    for line, op in [("a | b", TokenType.PIPE), ("a && b", TokenType.AND),
                     ("a || b", TokenType.OR), ("a & b", TokenType.BACKGROUND),
                     ("a ; b", TokenType.SEQUENCE), ("a\nb", TokenType.EOL)]:
        command = CommandLineParser(line).command_begin()
        assert command.str().strip() == "a"
        assert command.next_op() == op


def test_advancing_past_last_unit_exhausts_the_view():
    first = CommandLineParser("a ; b").conditional_begin()
    second = first.advance()
    assert second.str() == "b"

    third = second.advance()
    assert not third
    assert third == third.end_region()
    assert third == second.end_region()
    assert third.advance() == third


def test_advance_returns_a_new_view():
    first = CommandLineParser("a ; b").conditional_begin()
    second = first.advance()
    assert first.str().strip() == "a"
    assert second is not first
    assert second.end == first.end


def test_start_is_monotonic():
    starts = [v.start for v in CommandLineParser("a ; b & c ; d").conditional_begin()]
    assert starts == sorted(starts)
    assert len(set(starts)) == 4


def test_equality_compares_bounds_not_content():
    assert CommandLineParser("abc") == CommandLineParser("xyz")
    assert CommandLineParser("abc") != CommandLineParser("abcd")


def test_views_compare_with_tokenizers():
    command = CommandLineParser("a b | c").command_begin()
    assert command.token_begin() == command
    assert command.token_end() == command.end_region()
    assert [t.str() for t in command.token_begin()] == ["a", "b"]


def test_parenthesised_groups_are_one_unit():
    cond = CommandLineParser("(a ; b) && c").conditional_begin()
    assert strs(cond) == ["(a ; b) && c"]
    assert strs(cond.pipeline_begin()) == ["(a ; b)", "c"]
    assert strs(cond.command_begin()) == ["(a ; b)"]


def test_stray_right_paren_terminates_every_level():
    cond = CommandLineParser("a ) b").conditional_begin()
    assert cond.str().strip() == "a"
    assert cond.next_op() == TokenType.RPAREN
    assert cond.advance().empty()


def test_newlines_separate_conditionals():
    conditionals = list(CommandLineParser("a\nb").conditional_begin())
    assert strs(conditionals) == ["a", "b"]
    assert conditionals[0].next_op() == TokenType.EOL


def test_views_can_be_built_from_buffer_bounds():
    line = "skip ; x | y"
    pipeline = PipelineParser.first_delimited(line, line.index("x"), len(line))
    assert pipeline.str() == "x | y"
    assert strs(pipeline.command_begin()) == ["x", "y"]
    assert ConditionalParser(line, 7).str() == "x | y"


def test_parsing_is_deterministic():
    line = "a | b && c ; d &"
    first = [(v.start, v.stop) for v in CommandLineParser(line).conditional_begin()]
    again = [(v.start, v.stop) for v in CommandLineParser(line).conditional_begin()]
    assert first == again


def test_blank_line_is_empty():
    line = CommandLineParser("   ")
    assert not line.conditional_begin()
    assert line.conditional_begin().next_op() == TokenType.EOL


# --- Nested views share the whole line's end ---

def test_nested_pipeline_sees_operator_after_its_conditional():
    line = CommandLineParser("a | b ; c")
    pipeline = line.conditional_begin().pipeline_begin()
    assert pipeline.str().strip() == "a | b"
    assert pipeline.end == line.end == 9
    assert pipeline.next_op() == TokenType.SEQUENCE


def test_nested_command_sees_operator_after_its_pipeline():
    cond = CommandLineParser("a | b && c &").conditional_begin()
    pipelines = list(cond.pipeline_begin())
    commands = list(pipelines[0].command_begin())
    assert strs(commands) == ["a", "b"]
    assert commands[0].next_op() == TokenType.PIPE
    assert commands[1].next_op() == TokenType.AND

    last = list(pipelines[1].command_begin())[-1]
    assert last.str().strip() == "c"
    assert last.next_op() == TokenType.BACKGROUND


def test_nested_iteration_stays_inside_parent():
    cond = CommandLineParser("a | b ; c | d").conditional_begin()
    assert strs(cond.pipeline_begin()) == ["a | b"]
    assert strs(cond.pipeline_begin().command_begin()) == ["a", "b"]


# --- Blank lines ---

def test_blank_lines_do_not_end_iteration():
    conditionals = list(CommandLineParser("a\n\nb").conditional_begin())
    assert strs(conditionals) == ["a", "b"]


def test_leading_and_trailing_newlines():
    assert strs(CommandLineParser("\na").conditional_begin()) == ["a"]
    assert strs(CommandLineParser("\n \n a ;\n\n b\n\n").conditional_begin()) == ["a", "b"]
    assert not CommandLineParser("\n\n").conditional_begin()
