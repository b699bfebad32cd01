__version__ = "0.1.0"

from .diagnostics import (
    Diagnostic, EmissionError, UnsupportedTypeReferenceError, ScopeOrderError, BuilderClosedError,
)
from .model import (
    SpecialType, Accessibility, GeneratedTypeKind, RefKind, TypeReference,
    AttributeDescriptor, ParameterDescriptor, MethodDescriptor, FieldSymbol, TypeSymbol,
    nullable_value_of, array_of,
)
from .names import render_namespace, render_type_reference, render_doc_reference
from .codegen import TextSink, IndentationScope
from .members import (
    VirtualModifier, PropertyBuilder, MethodBuilder, MethodParametersBuilder, MethodBodyBuilder,
)
from .declarations import OpeningTypeBuilder, TypeInheritanceBuilder, TypeBuilder
from .source import (
    SourceContext, InMemorySourceContext, DirectorySourceContext, GeneratorAttribute, SourceBuilder,
    add_attribute_source,
)
from .query import (
    CancellationToken, OperationCancelledError, AttributeSyntaxContext, IncrementalValues,
    SymbolValuesProvider, for_type_with_attribute,
)
from .cst_source import Compilation, CstSyntaxProvider
from .generator import GeneratorConfig, DtoGenerator, run_generation, generate_to_directory

__all__ = [
    "__version__",
    # diagnostics
    "Diagnostic", "EmissionError", "UnsupportedTypeReferenceError", "ScopeOrderError", "BuilderClosedError",
    # model
    "SpecialType", "Accessibility", "GeneratedTypeKind", "RefKind", "TypeReference",
    "AttributeDescriptor", "ParameterDescriptor", "MethodDescriptor", "FieldSymbol", "TypeSymbol",
    "nullable_value_of", "array_of",
    # names & sink
    "render_namespace", "render_type_reference", "render_doc_reference", "TextSink", "IndentationScope",
    # builders
    "VirtualModifier", "PropertyBuilder", "MethodBuilder", "MethodParametersBuilder", "MethodBodyBuilder",
    "OpeningTypeBuilder", "TypeInheritanceBuilder", "TypeBuilder",
    # source files
    "SourceContext", "InMemorySourceContext", "DirectorySourceContext", "GeneratorAttribute", "SourceBuilder",
    "add_attribute_source",
    # queries
    "CancellationToken", "OperationCancelledError", "AttributeSyntaxContext", "IncrementalValues",
    "SymbolValuesProvider", "for_type_with_attribute", "Compilation", "CstSyntaxProvider",
    # generator
    "GeneratorConfig", "DtoGenerator", "run_generation", "generate_to_directory",
]
