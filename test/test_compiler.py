import logging

import pytest

from picograph.compiler import compile_json
from picograph.compiler.assembler import HEADER, NO_ENTRY
from picograph.compiler.context import CompilationContext, ExecContext
from picograph.compiler.emitter import LuaEmitter
from picograph.config import CompilerSettings
from picograph.core.GraphPrimitives import Graph
from picograph.core.Types import OMIT
from picograph.errors import (
    DanglingValueReference,
    DuplicateEntryPoint,
    GraphCycleDetected,
    GraphTooComplex,
    InvalidPropertyValue,
    MissingRequiredInput,
    UnknownNodeDefinition,
)
from picograph.nodes import default_catalogue


def _node(node_id, definition_id, properties=None, **flags):
    data = {"id": node_id, "definitionId": definition_id, "properties": properties or {}}
    data.update(flags)
    return data


def _link(source, source_pin, target, target_pin):
    return {"fromNode": source, "fromPin": source_pin, "toNode": target, "toPin": target_pin}


def _graph(nodes, connections=(), **extra):
    data = {"nodes": list(nodes), "connections": list(connections)}
    data.update(extra)
    return data


def _program(*lines):
    return "\n".join(lines)


class TestCompileBasics:

    def setup_method(self):
        self.catalogue = default_catalogue()

    def compile(self, data, settings=None):
        return compile_json(data, self.catalogue, settings)

    def test_no_entry_node(self):
        """A graph without entry nodes compiles to the header and a notice"""
        source = self.compile(_graph([_node("c", "graphics_cls")]))
        assert source == _program(HEADER, NO_ENTRY)

    def test_empty_event_body(self):
        """An entry node with nothing connected emits an empty function"""
        source = self.compile(_graph([_node("start", "event_start")]))
        assert source == _program(HEADER, "", "function _init()", "end")

    def test_linear_chain(self):
        """Statements follow the exec chain in order"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("cls", "graphics_cls", {"pin:color": 0}),
                _node("circ", "graphics_circ", {"pin:x": 64, "pin:y": 64, "pin:color": 8}),
            ],
            [_link("start", "exec_out", "cls", "exec_in"), _link("cls", "exec_out", "circ", "exec_in")],
        )
        assert self.compile(data) == _program(
            HEADER,
            "",
            "function _init()",
            "  cls(0)",
            "  circ(64, 64, 4, 8)",
            "end",
        )

    def test_trailing_optional_argument_dropped(self):
        """circ without a colour is emitted with three arguments"""
        data = _graph(
            [_node("start", "event_start"), _node("circ", "graphics_circ", {"pin:x": 64, "pin:y": 64})],
            [_link("start", "exec_out", "circ", "exec_in")],
        )
        assert "  circ(64, 64, 4)" in self.compile(data).splitlines()

    def test_omitted_middle_slots_take_placeholders(self):
        """spr fills omitted size and flip slots before a provided one"""
        data = _graph(
            [_node("start", "event_start"), _node("spr", "graphics_spr", {"pin:flip_y": True})],
            [_link("start", "exec_out", "spr", "exec_in")],
        )
        assert "  spr(0, 0, 0, 1, 1, false, true)" in self.compile(data).splitlines()

    def test_sfx_optional_slots(self):
        """sfx keeps nil placeholders up to the last provided argument"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("a", "audio_sfx"),
                _node("b", "audio_sfx", {"pin:id": 3, "pin:offset": 4}),
            ],
            [_link("start", "exec_out", "a", "exec_in"), _link("a", "exec_out", "b", "exec_in")],
        )
        lines = self.compile(data).splitlines()
        assert "  sfx(0)" in lines
        assert "  sfx(3, nil, 4)" in lines

    def test_unconnected_value_inputs_use_fallback_text(self):
        """Unconnected operands of a pure node fall back to their identity literal"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_var", {"name": "score"}),
                _node("add", "add_number", {"pin:a": 2}),
            ],
            [_link("start", "exec_out", "set", "exec_in"), _link("add", "sum", "set", "value")],
        )
        assert "  score = (2) + (0)" in self.compile(data).splitlines()

    def test_value_expressions_nest(self):
        """Pure nodes inline into their reader's expression"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_var", {"name": "x"}),
                _node("flr", "math_flr"),
                _node("mul", "multiply_number", {"pin:b": 128}),
                _node("rnd", "math_rnd"),
            ],
            [
                _link("start", "exec_out", "set", "exec_in"),
                _link("flr", "result", "set", "value"),
                _link("mul", "product", "flr", "value"),
                _link("rnd", "result", "mul", "a"),
            ],
        )
        assert "  x = flr((rnd(1)) * (128))" in self.compile(data).splitlines()

    def test_literal_nodes(self):
        """Literal nodes render their property as Lua text"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("p", "print"),
                _node("msg", "string_literal", {"value": 'say "hi"'}),
                _node("x", "number_literal", {"value": 7.0}),
            ],
            [
                _link("start", "exec_out", "p", "exec_in"),
                _link("msg", "value", "p", "msg"),
                _link("x", "value", "p", "x"),
            ],
        )
        assert '  print("say \\"hi\\"", 7, 0, 7)' in self.compile(data).splitlines()

    def test_custom_indent_width(self):
        """The indent unit comes from the settings"""
        data = _graph(
            [_node("start", "event_start"), _node("cls", "graphics_cls")],
            [_link("start", "exec_out", "cls", "exec_in")],
        )
        source = self.compile(data, CompilerSettings(indent_width=4))
        assert "    cls()" in source.splitlines()

    def test_compile_is_repeatable(self):
        """Two compiles of the same document produce identical output"""
        data = _graph(
            [_node("start", "event_start"), _node("res", "lua_coroutine_resume"), _node("co", "lua_coroutine_create")],
            [_link("start", "exec_out", "res", "exec_in"), _link("co", "coroutine", "res", "coroutine")],
        )
        assert self.compile(data) == self.compile(data)


class TestEntryPoints:

    def setup_method(self):
        self.catalogue = default_catalogue()

    def test_lifecycle_order(self):
        """Lifecycle functions come out in _init, _update, _draw order, then other events"""
        data = _graph([
            _node("tick", "graphics_cls", isEntryPoint=True, eventName="zz_tick"),
            _node("draw", "event_draw"),
            _node("update", "event_update"),
            _node("start", "event_start"),
        ])
        functions = [line for line in compile_json(data, self.catalogue).splitlines() if line.startswith("function")]
        assert functions == [
            "function _init()",
            "function _update()",
            "function _draw()",
            "function zz_tick()",
        ]

    def test_use_60fps_setting(self):
        """_update becomes _update60 when 60fps is requested"""
        data = _graph([_node("update", "event_update")])
        source = compile_json(data, self.catalogue, CompilerSettings(use_60fps=True))
        assert "function _update60()" in source
        assert "function _update()" not in source

    def test_use_60fps_from_document(self):
        """The document's settings.use60Fps also turns on the remap"""
        data = _graph([_node("update", "event_update")], settings={"use60Fps": True})
        assert "function _update60()" in compile_json(data, self.catalogue)

    def test_duplicate_entry_point(self):
        """Two entry nodes for the same event are rejected"""
        data = _graph([_node("a", "event_start"), _node("b", "event_start")])
        with pytest.raises(DuplicateEntryPoint) as info:
            compile_json(data, self.catalogue)
        assert info.value.event_name == "_init"
        assert info.value.node_ids == ["a", "b"]

    def test_duplicate_after_60fps_remap(self):
        """_update and _update60 collide once the remap applies"""
        data = _graph([
            _node("a", "event_update"),
            _node("b", "graphics_cls", isEntryPoint=True, eventName="_update60"),
        ])
        with pytest.raises(DuplicateEntryPoint):
            compile_json(data, self.catalogue, CompilerSettings(use_60fps=True))

    def test_instance_flag_disables_entry(self):
        """isEntryPoint false on an event node removes its function"""
        data = _graph([_node("start", "event_start", isEntryPoint=False)])
        assert compile_json(data, self.catalogue) == _program(HEADER, NO_ENTRY)


class TestFlowControl:

    def setup_method(self):
        self.catalogue = default_catalogue()

    def compile(self, data):
        return compile_json(data, self.catalogue)

    def test_if_then(self):
        """if nests its then branch one level deeper"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("if", "if"),
                _node("cmp", "compare", {"operator": "!=", "pin:a": 1, "pin:b": 2}),
                _node("p", "print"),
            ],
            [
                _link("start", "exec_out", "if", "exec_in"),
                _link("cmp", "res", "if", "condition"),
                _link("if", "then", "p", "exec_in"),
            ],
        )
        assert self.compile(data) == _program(
            HEADER,
            "",
            "function _init()",
            "  if (1) ~= (2) then",
            '    print("hello", 0, 0, 7)',
            "  end",
            "end",
        )

    def test_if_else_with_empty_then(self):
        """An empty then branch gets a comment placeholder"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("if", "if"),
                _node("btn", "input_btn", {"pin:button": 4}),
                _node("cls", "graphics_cls"),
            ],
            [
                _link("start", "exec_out", "if", "exec_in"),
                _link("btn", "value", "if", "condition"),
                _link("if", "else", "cls", "exec_in"),
            ],
        )
        assert self.compile(data).splitlines()[3:] == [
            "  if btn(4) then",
            "    -- then branch",
            "  else",
            "    cls()",
            "  end",
            "end",
        ]

    def test_for_loop_binds_index(self):
        """The loop index is readable inside the body; completed runs after end"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("loop", "for_loop", {"pin:end": 3}),
                _node("p", "print"),
                _node("cls", "graphics_cls"),
            ],
            [
                _link("start", "exec_out", "loop", "exec_in"),
                _link("loop", "loop", "p", "exec_in"),
                _link("loop", "index", "p", "x"),
                _link("loop", "completed", "cls", "exec_in"),
            ],
        )
        assert self.compile(data).splitlines()[3:] == [
            "  for i = 0, 3, 1 do",
            '    print("hello", i, 0, 7)',
            "  end",
            "  cls()",
            "end",
        ]

    def test_for_loop_index_after_loop_is_dangling(self):
        """Reading the loop index after the loop closes is an error"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("loop", "for_loop"),
                _node("p", "print"),
            ],
            [
                _link("start", "exec_out", "loop", "exec_in"),
                _link("loop", "completed", "p", "exec_in"),
                _link("loop", "index", "p", "x"),
            ],
        )
        with pytest.raises(DanglingValueReference) as info:
            self.compile(data)
        assert info.value.node_id == "loop"
        assert info.value.reader_id == "p"

    def test_empty_loop_body(self):
        """A loop with no body gets a comment placeholder"""
        data = _graph(
            [_node("start", "event_start"), _node("loop", "for_loop", {"index": "End"})],
            [_link("start", "exec_out", "loop", "exec_in")],
        )
        assert self.compile(data).splitlines()[3:6] == [
            "  for end_ = 0, 10, 1 do",
            "    -- loop body",
            "  end",
        ]

    def test_sequence_branches(self):
        """Sequence runs each branch in order at its own indent"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("seq", "sequence", {"branches": ["first", "second"]}),
                _node("cls", "graphics_cls"),
                _node("pset", "graphics_pset", {"pin:color": 8}),
            ],
            [
                _link("start", "exec_out", "seq", "exec_in"),
                _link("seq", "first", "cls", "exec_in"),
                _link("seq", "second", "pset", "exec_in"),
            ],
        )
        assert self.compile(data).splitlines()[3:] == [
            "  -- sequence first",
            "  cls()",
            "  -- sequence second",
            "  pset(0, 0, 8)",
            "end",
        ]


class TestStatefulOutputs:

    def setup_method(self):
        self.catalogue = default_catalogue()

    def _resume_graph(self, reader_branch):
        return _graph(
            [
                _node("start", "event_start"),
                _node("seq", "sequence", {"branches": ["a", "b"]}),
                _node("if", "if"),
                _node("res", "lua_coroutine_resume"),
                _node("co", "lua_coroutine_create"),
                _node("p", "print"),
            ],
            [
                _link("start", "exec_out", "seq", "exec_in"),
                _link("co", "coroutine", "res", "coroutine"),
                _link("res", "result", "p", "msg"),
                _link("seq", "b", "p", "exec_in"),
                *reader_branch,
            ],
        )

    def test_resume_binds_hidden_locals(self):
        """Resume results are read back through the hidden locals it declares"""
        data = self._resume_graph([_link("seq", "a", "res", "exec_in")])
        assert compile_json(data, self.catalogue).splitlines()[3:] == [
            "  -- sequence a",
            "  local __pg_res_co_success, __pg_res_co_result = coroutine.resume(coroutine.create(function() end))",
            "  -- sequence b",
            "  print(__pg_res_co_result, 0, 0, 7)",
            "end",
        ]

    def test_binding_inside_if_is_dangling_outside(self):
        """A binding made inside an if body is gone after the if ends"""
        data = self._resume_graph([
            _link("seq", "a", "if", "exec_in"),
            _link("if", "then", "res", "exec_in"),
        ])
        with pytest.raises(DanglingValueReference) as info:
            compile_json(data, self.catalogue)
        assert info.value.pin_id == "result"

    def test_binding_from_another_event_is_dangling(self):
        """Each entry function starts with an empty scope"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("draw", "event_draw"),
                _node("res", "lua_coroutine_resume", {"pin:coroutine": "co"}),
                _node("p", "print"),
            ],
            [
                _link("start", "exec_out", "res", "exec_in"),
                _link("draw", "exec_out", "p", "exec_in"),
                _link("res", "result", "p", "x"),
            ],
        )
        with pytest.raises(DanglingValueReference):
            compile_json(data, self.catalogue)

    def test_missing_required_input(self):
        """Resume without a coroutine is rejected"""
        data = _graph(
            [_node("start", "event_start"), _node("res", "lua_coroutine_resume")],
            [_link("start", "exec_out", "res", "exec_in")],
        )
        with pytest.raises(MissingRequiredInput) as info:
            compile_json(data, self.catalogue)
        assert (info.value.node_id, info.value.pin_id) == ("res", "coroutine")

    def test_user_name_never_shadows_hidden_local(self):
        """A local named like a compiler temporary is renamed"""
        data = _graph(
            [_node("start", "event_start"), _node("set", "set_local_var", {"name": "__pg_res_co_result"})],
            [_link("start", "exec_out", "set", "exec_in")],
        )
        assert "  local v__pg_res_co_result = 0" in compile_json(data, self.catalogue).splitlines()


class TestVariables:

    def setup_method(self):
        self.catalogue = default_catalogue()

    def test_globals_declared_and_deduplicated(self):
        """Workspace variables become globals; clashing names get a suffix"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_var", {"variableId": "v2", "pin:value": "hi"}),
            ],
            [_link("start", "exec_out", "set", "exec_in")],
            variables=[
                {"id": "v1", "name": "Score", "type": "number", "defaultValue": 0},
                {"id": "v2", "name": "score", "type": "string"},
                {"id": "v3", "name": "pos", "type": "table",
                 "defaultValue": [{"key": "x", "value": "1"}, {"key": "y", "value": "2"}]},
            ],
        )
        assert compile_json(data, self.catalogue) == _program(
            HEADER,
            "",
            "score = 0",
            'score_2 = ""',
            "pos = { x = 1, y = 2 }",
            "",
            "function _init()",
            '  score_2 = "hi"',
            "end",
        )

    def test_get_var_by_id(self):
        """get_var resolves the declared name through its variable id"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_var", {"variableId": "v1"}),
                _node("get", "get_var", {"variableId": "v1"}),
                _node("add", "add_number", {"pin:b": 1}),
            ],
            [
                _link("start", "exec_out", "set", "exec_in"),
                _link("add", "sum", "set", "value"),
                _link("get", "value", "add", "a"),
            ],
            variables=[{"id": "v1", "name": "Lives", "type": "number", "defaultValue": 3}],
        )
        lines = compile_json(data, self.catalogue).splitlines()
        assert "lives = 3" in lines
        assert "  lives = (lives) + (1)" in lines

    def test_locals(self):
        """set_local_var declares a local; get_local_var reads it by name"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_local_var", {"name": "Speed", "variableType": "number", "value": "2.5"}),
                _node("p", "print"),
                _node("get", "get_local_var", {"name": "Speed"}),
            ],
            [
                _link("start", "exec_out", "set", "exec_in"),
                _link("set", "exec_out", "p", "exec_in"),
                _link("get", "value", "p", "x"),
            ],
        )
        assert compile_json(data, self.catalogue).splitlines()[3:5] == [
            "  local speed = 2.5",
            '  print("hello", speed, 0, 7)',
        ]

    def test_reserved_word_local(self):
        """A local named after a Lua keyword is suffixed"""
        data = _graph(
            [_node("start", "event_start"), _node("set", "set_local_var", {"name": "end", "variableType": "boolean"})],
            [_link("start", "exec_out", "set", "exec_in")],
        )
        assert "  local end_ = false" in compile_json(data, self.catalogue).splitlines()


class TestCustomEvents:

    def setup_method(self):
        self.catalogue = default_catalogue()
        self.event = _node(
            "ce",
            "custom_event",
            {
                "name": "Spawn Enemy",
                "parameters": [
                    {"id": "p1", "name": "X", "type": "number"},
                    {"id": "p2", "name": "Label", "type": "string", "optional": True},
                ],
            },
        )

    def test_custom_event_function_and_call(self):
        """Custom events become functions; calls pass arguments by parameter"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("call", "call_custom_event", {"eventId": "ce", "pin:arg_p1": 5}),
                self.event,
                _node("p", "print"),
            ],
            [
                _link("start", "exec_out", "call", "exec_in"),
                _link("ce", "exec_out", "p", "exec_in"),
                _link("ce", "param_p1", "p", "x"),
                _link("ce", "param_p2", "p", "msg"),
            ],
        )
        assert compile_json(data, self.catalogue) == _program(
            HEADER,
            "",
            "function _init()",
            "  custom_spawn_enemy(5)",
            "end",
            "",
            "function custom_spawn_enemy(x, label)",
            "  print(label, x, 0, 7)",
            "end",
        )

    def test_required_argument_defaults_by_kind(self):
        """A missing non-optional argument is passed as its kind's zero value"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("call", "call_custom_event", {"eventId": "ce", "pin:arg_p2": "go"}),
                self.event,
            ],
            [_link("start", "exec_out", "call", "exec_in")],
        )
        assert '  custom_spawn_enemy(0, "go")' in compile_json(data, self.catalogue).splitlines()

    def test_missing_target(self):
        """A call to an unknown event leaves a comment"""
        data = _graph(
            [_node("start", "event_start"), _node("call", "call_custom_event", {"eventId": "nope"})],
            [_link("start", "exec_out", "call", "exec_in")],
        )
        assert "  -- missing custom event target" in compile_json(data, self.catalogue).splitlines()

    def test_function_names_deduplicated(self):
        """Custom events with the same name get numbered function names"""
        data = _graph([
            _node("a", "custom_event", {"name": "Boom"}),
            _node("b", "custom_event", {"name": "Boom"}),
        ])
        functions = [line for line in compile_json(data, self.catalogue).splitlines() if line.startswith("function")]
        assert functions == ["function custom_boom()", "function custom_boom_1()"]

    def test_custom_events_sorted_by_name(self):
        """Custom event functions come after lifecycle ones, by display name"""
        data = _graph([
            _node("z", "custom_event", {"name": "zap"}),
            _node("a", "custom_event", {"name": "Alpha"}),
            _node("start", "event_start"),
        ])
        functions = [line for line in compile_json(data, self.catalogue).splitlines() if line.startswith("function")]
        assert functions == ["function _init()", "function custom_alpha()", "function custom_zap()"]


class TestCompileErrors:

    def setup_method(self):
        self.catalogue = default_catalogue()

    def test_exec_cycle(self):
        """An exec chain that loops back on itself is rejected"""
        data = _graph(
            [
                _node("a", "graphics_cls", isEntryPoint=True, eventName="_init"),
                _node("b", "graphics_cls"),
            ],
            [_link("a", "exec_out", "b", "exec_in"), _link("b", "exec_out", "a", "exec_in")],
        )
        with pytest.raises(GraphCycleDetected) as info:
            compile_json(data, self.catalogue)
        assert info.value.graph == "exec"

    def test_value_cycle(self):
        """A value expression that depends on itself is rejected"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_var"),
                _node("x", "add_number"),
                _node("y", "add_number"),
            ],
            [
                _link("start", "exec_out", "set", "exec_in"),
                _link("x", "sum", "y", "a"),
                _link("y", "sum", "x", "a"),
                _link("x", "sum", "set", "value"),
            ],
        )
        with pytest.raises(GraphCycleDetected) as info:
            compile_json(data, self.catalogue)
        assert info.value.graph == "value"

    def test_max_steps(self):
        """Visiting more nodes than max_steps aborts the compile"""
        data = _graph(
            [_node("start", "event_start"), _node("a", "graphics_cls"), _node("b", "graphics_cls")],
            [_link("start", "exec_out", "a", "exec_in"), _link("a", "exec_out", "b", "exec_in")],
        )
        with pytest.raises(GraphTooComplex) as info:
            compile_json(data, self.catalogue, CompilerSettings(max_steps=2))
        assert info.value.limit_name == "max_steps"

    def test_max_depth(self):
        """Blocks nested deeper than max_depth abort the compile"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("loop", "for_loop"),
                _node("if", "if"),
                _node("cls", "graphics_cls"),
            ],
            [
                _link("start", "exec_out", "loop", "exec_in"),
                _link("loop", "loop", "if", "exec_in"),
                _link("if", "then", "cls", "exec_in"),
            ],
        )
        with pytest.raises(GraphTooComplex) as info:
            compile_json(data, self.catalogue, CompilerSettings(max_depth=2))
        assert info.value.limit_name == "max_depth"
        assert info.value.node_id == "cls"

    def test_straight_chain_ignores_max_depth(self):
        """Sequential statements do not count towards the nesting ceiling"""
        data = _graph(
            [_node("start", "event_start"), _node("a", "graphics_cls"), _node("b", "graphics_cls")],
            [_link("start", "exec_out", "a", "exec_in"), _link("a", "exec_out", "b", "exec_in")],
        )
        source = compile_json(data, self.catalogue, CompilerSettings(max_depth=1))
        assert source.endswith(_program("function _init()", "  cls()", "  cls()", "end"))

    def test_long_straight_chain(self):
        """A 600 statement draw body compiles with default settings"""
        count = 600
        nodes = [_node("draw", "event_draw")]
        connections = []
        previous = "draw"
        for i in range(count):
            node_id = f"p{i}"
            nodes.append(_node(node_id, "graphics_pset", {"pin:x": i % 128, "pin:y": i // 128}))
            connections.append(_link(previous, "exec_out", node_id, "exec_in"))
            previous = node_id

        lines = compile_json(_graph(nodes, connections), self.catalogue).splitlines()

        body = lines[lines.index("function _draw()") + 1:-1]
        assert len(body) == count
        assert body[0] == "  pset(0, 0)"
        assert body[-1] == "  pset(87, 4)"
        assert lines[-1] == "end"

    def test_invalid_operator(self):
        """An operator outside the enum is an invalid property"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("if", "if"),
                _node("cmp", "compare", {"operator": "=<"}),
            ],
            [_link("start", "exec_out", "if", "exec_in"), _link("cmp", "res", "if", "condition")],
        )
        with pytest.raises(InvalidPropertyValue) as info:
            compile_json(data, self.catalogue)
        assert info.value.node_id == "cmp"

    def test_invalid_number_literal(self):
        """A non-numeric number literal is rejected with its node id"""
        data = _graph(
            [
                _node("start", "event_start"),
                _node("set", "set_var"),
                _node("n", "number_literal", {"value": "lots"}),
            ],
            [_link("start", "exec_out", "set", "exec_in"), _link("n", "value", "set", "value")],
        )
        with pytest.raises(InvalidPropertyValue) as info:
            compile_json(data, self.catalogue)
        assert info.value.node_id == "n"

    def test_unknown_definition(self, caplog):
        """An unknown definition warns during validation, then fails to load"""
        caplog.set_level(logging.WARNING)
        data = _graph([_node("x", "teleport")])
        with pytest.raises(UnknownNodeDefinition) as info:
            compile_json(data, self.catalogue)
        assert info.value.definition_id == "teleport"
        assert "unknown node definition 'teleport'" in caplog.text

    def test_error_to_dict(self):
        """Errors carry a serialisable kind, message and location"""
        data = _graph(
            [_node("start", "event_start"), _node("res", "lua_coroutine_resume")],
            [_link("start", "exec_out", "res", "exec_in")],
        )
        with pytest.raises(MissingRequiredInput) as info:
            compile_json(data, self.catalogue)
        payload = info.value.to_dict()
        assert payload["error"] == "MissingRequiredInput"
        assert payload["nodeId"] == "res"
        assert payload["pinId"] == "coroutine"


class TestValueResolution:

    def setup_method(self):
        self.graph = Graph(default_catalogue())
        self.emitter = LuaEmitter(CompilationContext(self.graph))

    def context(self, node_id):
        return ExecContext(self.emitter, node_id, 1, frozenset({node_id}))

    def test_unconnected_pin_returns_fallback(self):
        """An input without a connection resolves to the caller's fallback verbatim"""
        self.graph.create_node("graphics_circ", "c", **{"pin:color": 8})
        ctx = self.context("c")

        assert ctx.resolve_value_input("color", "FALLBACK") == "FALLBACK"
        assert ctx.resolve_value_input("color", OMIT) is OMIT
        assert ctx.emit_next_exec("exec_out") == []

    def test_connected_pin_ignores_fallback(self):
        """A connected input evaluates its producer instead of the fallback"""
        self.graph.create_node("graphics_circ", "c")
        self.graph.create_node("number_literal", "n", value=12)
        self.graph.connect("n", "value", "c", "color")

        assert self.context("c").resolve_value_input("color", "FALLBACK") == "12"
