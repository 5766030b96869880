"""PHP code generator.

Renders a node tree into PHP template source: literal markup with embedded
``<?php ... ?>`` statements. Rendering is a pure function of the tree and the
configuration, apart from compiling a Document on first render.
"""

import html

from ..ast import CodeBlock, Node, NodeKind, VariableExpression
from ..config import DEFAULT_CONFIG, HahConfig


def generate_php(node: Node, config: HahConfig = DEFAULT_CONFIG) -> str:
    """Render ``node`` and its subtree as PHP source."""
    match node.kind:
        case NodeKind.TAG:
            return _tag(node, config)
        case NodeKind.VARIABLE:
            return _variable(node, config)
        case NodeKind.CODE_BLOCK:
            return _code_block(node, config)
        case NodeKind.RAW:
            return node.value
        case NodeKind.SUB_DOCUMENT:
            return _sub_document(node, config)
        case NodeKind.DOCUMENT:
            if not node.compiled:
                node.compile()
            return _children(node, config)
    raise TypeError(f"cannot render node kind {node.kind!r}")


def escape_html(value: str) -> str:
    """Escape ``& < > "`` like PHP's htmlspecialchars with ENT_COMPAT."""
    return html.escape(value, quote=False).replace('"', "&quot;")


def escape_php_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _indent(node: Node, config: HahConfig) -> str:
    return config.indent * node.level


def _children(node: Node, config: HahConfig, sep: str = "") -> str:
    return sep.join(generate_php(child, config) for child in node.children)


def _tag(node: Node, config: HahConfig) -> str:
    indent = _indent(node, config)
    closed = not node.children and node.value == "" and config.can_self_close(node.name)

    output = ("" if node.parent is not None and node.parent.is_singular() else indent) + "<" + node.name

    for key, value in node.attributes.items():
        if isinstance(key, int):
            output += generate_php(value, config) if isinstance(value, Node) else str(value)
        elif isinstance(value, VariableExpression):
            output += f' {key}="{generate_php(value, config)}"'
        else:
            output += f' {key}="{escape_html(str(value))}"'

    if closed:
        return output + " />"

    output += ">" + node.value

    if node.is_singular():
        output += _children(node, config)
    elif node.children:
        nl = config.newline
        output += nl + _children(node, config, nl) + nl + indent

    return output + f"</{node.name}>"


def _variable(node: VariableExpression, config: HahConfig) -> str:
    runtime = config.runtime_class
    code = node.name

    for key, value in node.attributes.items():
        arg = value.name if isinstance(value, Node) else value
        match key:
            case "date":
                code = f'{runtime}::date("{arg}",{code})'
            case "money":
                code = f"{runtime}::money({code})"
            case "list":
                code = f'{runtime}::htmllist({code},"{arg}")'
            case "table":
                code = f'{runtime}::table({code},"{arg}")'
            case _:
                code = f"{key}({code})"

    if node.no_empty_attribute:
        code = f"{runtime}::pick({code})"
        code = (
            f"(({code} == '')?'':' {node.no_empty_attribute}=\"'"
            f".htmlentities({code}, ENT_QUOTES).'\"')"
        )

    return f"<?php echo {code}; ?>"


def _code_block(node: CodeBlock, config: HahConfig) -> str:
    indent = _indent(node, config)

    if not node.children:
        return f"{indent}<?php {node.value}; ?>"

    output = f"{indent}<?php {node.value} {{ ?>"

    singular = node.is_singular()
    if singular:
        output += _children(node, config)
    else:
        nl = config.newline
        output += nl + _children(node, config, nl) + nl

    if not node.leave_block_open:
        output += ("" if singular else indent) + "<?php } ?>"

    return output


def _sub_document(node: Node, config: HahConfig) -> str:
    """Instantiate the imported document, pass parameters, echo it and release it.

    Parameters of the top-most document are forwarded as live variable
    references unless overridden on the import line.
    """
    output = f'<?php $__subhahdoc = new {config.document_class}("{node.name}"); '

    params: dict[str, str] = {}
    for name in node.top().attributes:
        if isinstance(name, str) and name not in node.attributes:
            params[name] = f"${name}"
    for name, value in node.attributes.items():
        if isinstance(name, int):
            continue
        if isinstance(value, Node):
            params[name] = value.name
        else:
            params[name] = f'"{escape_php_string(str(value))}"'

    for name, value in params.items():
        output += f"$__subhahdoc->set('{name}',{value}); "

    output += "echo $__subhahdoc; "
    output += "unset($__subhahdoc); "
    output += " ?>"
    return output
