def test_import_novella_package() -> None:
    import importlib

    module = importlib.import_module("novella")
    assert module is not None
    assert module.__version__


def test_import_interpreter_no_side_effects() -> None:
    from novella import CommandLog, StoryDef, StoryInterpreter

    interpreter = StoryInterpreter(StoryDef(start="A", nodes={"A": []}, variables={}))
    assert interpreter.status == "idle"
    assert isinstance(interpreter.sink, CommandLog)
    assert interpreter.sink.commands == []
