"""
Tests for the IR executor
"""

import io

import pytest
from pyvox.executor import IRExecutor, ExecutionError, StructuralError, RuntimeTypeError
from pyvox.ir import decode_program


def _run(text: str, stdin: str = "") -> str:
    out = io.StringIO()
    IRExecutor(decode_program(text), stdin=io.StringIO(stdin), stdout=out).execute()
    return out.getvalue()


class TestBasics:

    def test_mixed_add_prints_float(self):
        text = """
        set x 3
        set y 4.0
        added_to %t0 x y
        set z %t0
        print z
        """
        assert _run(text) == "7.0\n"

    def test_print_concatenates_without_separator(self):
        assert _run('set a 1\nprint "a=" a " b=" b " t=" true\n') == "a=1 b=null t=true\n"

    def test_unbound_variable_is_zero_in_arithmetic(self):
        assert _run("add %t0 missing 5\nprint %t0\n") == "5\n"

    def test_not(self):
        assert _run('not %t0 ""\nnot %t1 3\nprint %t0 %t1\n') == "truefalse\n"

    def test_input_is_sniffed_and_prompted(self):
        text = "input a\ninput b\ninput c\nadd %t0 a b\nprint %t0 c\n"
        assert _run(text, stdin="2\n0.5\nYes\n") == "> > > 2.5Yes\n"

    def test_input_at_eof_is_empty_text(self):
        assert _run('input a\neq %t0 a ""\nprint %t0\n') == "> true\n"

    def test_integer_overflow_wraps(self):
        text = "power %t0 2 31\nmul %t1 65536 65536\nprint %t0 \" \" %t1\n"
        assert _run(text) == "-2147483648 0\n"

    def test_huge_float_prints_in_exponent_form(self):
        text = "set x 12345678.0\nmul %t1 x 10\nprint x \" \" %t1\n"
        assert _run(text) == "1.2345678E7 1.2345678E8\n"

    def test_out_of_range_integer_text_names_a_variable(self):
        assert _run("print 2147483648\n") == "null\n"
        assert _run("input a\nadd %t0 a 1\nprint %t0\n", stdin="9999999999\n") == "> 99999999991\n"


class TestControlFlow:

    def test_while_loop(self):
        text = """
        set i 0
        label while_cond_0
        lt %t0 i 3
        if_false %t0 goto while_end_1
        print i
        add %t1 i 1
        set i %t1
        goto while_cond_0
        label while_end_1
        """
        assert _run(text) == "0\n1\n2\n"

    def test_top_level_return_halts(self):
        assert _run('print "before"\nreturn 0\nprint "after"\n') == "before\n"

    def test_unknown_label_is_fatal(self):
        with pytest.raises(StructuralError):
            _run("goto nowhere\n")

    def test_unknown_label_only_fails_when_taken(self):
        assert _run("if_false true goto nowhere\nprint 1\n") == "1\n"

    def test_duplicate_label_last_one_wins(self):
        text = "goto L\nlabel L\nprint 1\nlabel L\nprint 2\n"
        assert _run(text) == "2\n"

    def test_output_before_failure_is_kept(self):
        out = io.StringIO()
        ex = IRExecutor(decode_program('print "kept"\nsub %t0 "a" 1\n'), stdout=out)
        with pytest.raises(RuntimeTypeError) as ei:
            ex.execute()
        assert out.getvalue() == "kept\n"
        assert ei.value.pc == 1


class TestCalls:

    def test_call_binds_positional_args_and_returns(self):
        text = """
        goto start
        func_start add2
        add %t0 arg0 arg1
        return %t0
        func_end add2
        label start
        call add2 2 3 -> r
        print r
        """
        assert _run(text) == "5\n"

    def test_callee_reads_caller_variable(self):
        text = """
        goto start
        func_start peek
        print x
        set x 99
        print x
        return 0
        func_end peek
        label start
        set x 1
        call peek -> r
        print x
        """
        assert _run(text) == "1\n99\n1\n"

    def test_lookup_crosses_every_frame(self):
        text = """
        goto start
        func_start outer
        set only_outer "o"
        call inner -> r
        return r
        func_end outer
        func_start inner
        add %t0 g only_outer
        return %t0
        func_end inner
        label start
        set g "g"
        call outer -> v
        print v
        """
        assert _run(text) == "go\n"

    def test_arguments_resolved_in_caller_scope(self):
        text = """
        goto start
        func_start f
        call g arg0 -> r
        return r
        func_end f
        func_start g
        return arg0
        func_end g
        label start
        call f 7 -> v
        print v
        """
        assert _run(text) == "7\n"

    def test_recursion(self):
        text = """
        goto start
        func_start fact
        le %t0 arg0 1
        if_false %t0 goto rec
        return 1
        label rec
        sub %t1 arg0 1
        call fact %t1 -> %t2
        mul %t3 arg0 %t2
        return %t3
        func_end fact
        label start
        call fact 5 -> r
        print r
        """
        assert _run(text) == "120\n"

    def test_falling_off_a_function_returns_null(self):
        text = """
        goto start
        func_start noisy
        print "in"
        func_end noisy
        label start
        set r 1
        call noisy -> r
        print r
        """
        assert _run(text) == "in\nnull\n"

    def test_straight_line_execution_runs_through_definitions(self):
        assert _run('func_start main\nprint "hi"\nfunc_end main\nprint "done"\n') == "hi\ndone\n"

    def test_unknown_function(self):
        with pytest.raises(StructuralError):
            _run("call nope -> r\n")


class TestLogic:

    def test_no_short_circuit(self):
        # The right operand fails even though `false and ...` is decided.
        text = "mul %t0 true 2\nand %t1 false %t0\n"
        with pytest.raises(ExecutionError):
            _run(text)

    def test_both_operands_resolved(self):
        assert _run("or %t0 0 \"x\"\nand %t1 1 missing\nprint %t0 %t1\n") == "truefalse\n"


def test_check_references():
    ex = IRExecutor(decode_program("goto a\ncall f -> r\nlabel b\n"))
    problems = ex.check_references()
    assert len(problems) == 2
    assert "unknown label: a" in problems[0]
    assert "unknown function: f" in problems[1]
