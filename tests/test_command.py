"""Tests for genrule.command module."""

from genrule.command import Hole, ResolvedCommand


class TestResolvedCommand:
    """Tests for ResolvedCommand."""

    def test_str_uses_braced_holes(self):
        cmd = ResolvedCommand(("gen.sh ", Hole.IN, " > ", Hole.OUT))
        assert str(cmd) == "gen.sh ${in} > ${out}"

    def test_render(self):
        cmd = ResolvedCommand(("cat ", Hole.IN, " > ", Hole.OUT))
        assert cmd.render(["a.txt", "b.txt"], ["out/c.txt"]) == "cat a.txt b.txt > out/c.txt"

    def test_render_empty_inputs(self):
        cmd = ResolvedCommand(("touch ", Hole.OUT))
        assert cmd.render([], ["x", "y"]) == "touch x y"

    def test_from_segments_merges_literals(self):
        cmd = ResolvedCommand.from_segments(["a", "", "b", Hole.IN, "c", "d"])
        assert cmd.segments == ("ab", Hole.IN, "cd")

    def test_holes(self):
        cmd = ResolvedCommand.from_segments([Hole.OUT, " ", Hole.IN, " ", Hole.OUT])
        assert cmd.holes == (Hole.OUT, Hole.IN, Hole.OUT)

    def test_format(self):
        cmd = ResolvedCommand(("a$b ", Hole.IN))
        text = cmd.format(lambda s: s.upper(), lambda h: f"<{h.value}>")
        assert text == "A$B <in>"

    def test_equality_and_hash(self):
        a = ResolvedCommand(("x ", Hole.IN))
        b = ResolvedCommand.from_segments(["x", " ", Hole.IN])
        assert a == b
        assert hash(a) == hash(b)
