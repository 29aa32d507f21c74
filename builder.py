from minipack.emitter import emit
from minipack.graph import build_graph
from minipack.log import debug_log


def build(entry_path, analyzer=None, transformer=None, banner=True):
    """
    Bundle entry_path and everything it imports into one Python script.

    Returns the bundle text. Raises ParseError or UnresolvedPathError and
    produces nothing when any module cannot be bundled.
    """
    debug_log(f"Bundling entry: {entry_path}")
    graph = build_graph(entry_path, analyzer=analyzer, transformer=transformer)
    output = emit(graph, banner=banner)
    debug_log(f"Emitted {len(output)} characters for {len(graph)} module(s)")
    return output


def describe(entry_path, analyzer=None, transformer=None):
    """Build the module graph and summarize it without the lowered code."""
    graph = build_graph(entry_path, analyzer=analyzer, transformer=transformer)
    return [record.model_dump(exclude={"code"}) for record in graph]
