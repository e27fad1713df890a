"""Compile endpoint sources and write the generated modules.

A failed compile still produces valid Python: diagnostics are emitted as
module-level `raise ImportError(...)` statements, so importing the module
fails with the compiler's message instead of a confusing follow-up error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .ast_nodes import EndpointSpec
from .context_builder import RUNTIME_MODULE, build_context
from .errors import EndpointGenError
from .features import CapabilityCheck, ensure_feature_presence
from .loader import discover_sources, load_source, render_template
from .naming import module_name
from .parser import parse_endpoint

OUTPUT_DIR = Path(__file__).parent.parent / "generated"


@dataclass
class CompileResult:
    source_name: str
    code: str
    diagnostics: tuple[EndpointGenError, ...] = ()
    spec: EndpointSpec | None = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def raise_for_diagnostics(self) -> None:
        """Raise the first diagnostic, if any."""
        if self.diagnostics:
            raise self.diagnostics[0]


def compile_source(
    text: str,
    source_name: str = "<endpoint>",
    capability_check: CapabilityCheck | None = None,
    runtime: str = RUNTIME_MODULE,
) -> CompileResult:
    """Compile one endpoint source into the text of a Python module."""
    if capability_check is None:
        capability_error = ensure_feature_presence()
    else:
        capability_error = capability_check.result()

    try:
        spec = parse_endpoint(text)
        context = build_context(spec, source_name=source_name, runtime=runtime)
    except EndpointGenError as exc:
        diagnostics = [exc.with_filename(source_name)]
        if capability_error is not None:
            diagnostics.append(capability_error)
        code = render_template(
            "failed.py.j2",
            source_name=source_name,
            diagnostics=[str(d) for d in diagnostics],
        )
        return CompileResult(source_name, code, tuple(diagnostics))

    diagnostics = [capability_error] if capability_error is not None else []
    code = render_template(
        "module.py.j2",
        diagnostics=[str(d) for d in diagnostics],
        **context,
    )
    return CompileResult(source_name, code, tuple(diagnostics), spec)


def compile_file(path: Path, capability_check: CapabilityCheck | None = None) -> CompileResult:
    return compile_source(load_source(path), source_name=path.name, capability_check=capability_check)


def generate(result: CompileResult, output_dir: Path | None = None) -> Path:
    """Write one compiled module to the output directory."""
    out_dir = output_dir or OUTPUT_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    init_file = out_dir / "__init__.py"
    if not init_file.exists():
        init_file.write_text("")

    output_path = out_dir / f"{module_name(Path(result.source_name).stem)}.py"
    output_path.write_text(result.code, encoding="utf-8")
    return output_path


def generate_all(
    spec_dir: Path | None = None,
    output_dir: Path | None = None,
    capability_check: CapabilityCheck | None = None,
) -> list[CompileResult]:
    """Compile every endpoint source and write the generated modules."""
    out_dir = output_dir or OUTPUT_DIR
    results = []
    for path in discover_sources(spec_dir):
        result = compile_file(path, capability_check)
        generate(result, out_dir)
        results.append(result)

    print(f"Generated {out_dir} ({len(results)} endpoints)")
    return results
