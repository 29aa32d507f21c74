# ==========================================
# MODULE RESOLUTION RUNTIME
# ==========================================
# Embedded verbatim into every bundle. It must not import anything: bundled
# modules are resolved through the module table alone.

class Exports:
    """Attribute container a bundled module publishes its values on."""

    def __repr__(self):
        return "<exports " + ", ".join(sorted(vars(self))) + ">"


class Module:
    """Per-module state: unloaded modules have no Module, loading ones have loaded=False."""

    def __init__(self, id, filename, name=None):
        self.id = id
        self.filename = filename
        self.name = filename if name is None else name
        self.exports = Exports()
        self.loaded = False

    def __repr__(self):
        state = "loaded" if self.loaded else "loading"
        return f"<module {self.id} {self.filename!r} {state}>"


def define(filename, source):
    """Wrap lowered module source as a function of (require, module, exports)."""

    def factory(require, module, exports):
        code = compile(source, filename, "exec", dont_inherit=True)
        namespace = {
            "__name__": module.name,
            "__file__": filename,
            "require": require,
            "module": module,
            "exports": exports,
        }
        exec(code, namespace)

    factory.filename = filename
    return factory


def bootstrap(modules, main_name=None, entry=0):
    """Require the entry module of a module table and return its exports."""
    cache = {}

    def require(id):
        module = cache.get(id)
        if module is not None:
            return module.exports

        factory, mapping = modules[id]
        filename = getattr(factory, "filename", f"<module {id}>")
        module = Module(id, filename, main_name if id == entry else None)

        def local_require(specifier):
            if specifier not in mapping:
                raise ImportError(
                    f"{module.filename} has no bundled dependency {specifier!r}"
                )
            return require(mapping[specifier])

        cache[id] = module
        try:
            factory(local_require, module, module.exports)
        except BaseException:
            # A failed module is forgotten so a later require runs it again
            cache.pop(id, None)
            raise
        module.loaded = True
        return module.exports

    return require(entry)
