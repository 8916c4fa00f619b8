import importlib

MODULES = [
    "hostdiag.config.errors",
    "hostdiag.config.runtime",
    "hostdiag.config.settings",
    "hostdiag.health.state",
    "hostdiag.os_info.output",
    "hostdiag.sxid.types",
]


def test_modules_carry_docstrings():
    for module_path in MODULES:
        module = importlib.import_module(module_path)
        assert module.__doc__ and module.__doc__.strip(), module_path
