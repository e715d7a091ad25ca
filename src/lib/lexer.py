"""
Custom Pygments lexer for directive-annotated WGSL

Used when rendering source excerpts in diagnostics so directive lines stand
out from ordinary shader code.

Token types:
- Comment.Preproc: Directive marker and keyword (e.g., //:if, //:include)
- Name.Constant: Identifiers inside if conditions, const names
- Operator: Condition operators (&&, ==, ...)
- String: Include paths
- Keyword / Name / Number: Ordinary WGSL code
"""

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
    Whitespace,
)

from ..models.directives import BLOCK_KEYWORDS


WGSL_KEYWORDS = (
    'alias', 'break', 'case', 'const', 'const_assert', 'continue', 'continuing',
    'default', 'diagnostic', 'discard', 'else', 'enable', 'fn', 'for', 'if',
    'let', 'loop', 'override', 'requires', 'return', 'struct', 'switch', 'var',
    'while',
)

WGSL_TYPES = (
    'bool', 'f16', 'f32', 'i32', 'u32', 'vec2', 'vec3', 'vec4', 'mat2x2',
    'mat3x3', 'mat4x4', 'array', 'atomic', 'ptr', 'sampler', 'texture_2d',
    'texture_storage_2d',
)


class ShaderprepLexer(RegexLexer):
    """
    Lexer for WGSL with //: preprocessor directives

    Example:
        //:if quality >= 4.0
        //:const SAMPLE_SIZE

    Tokens:
        //:if → Comment.Preproc
        quality → Name.Constant
        >= → Operator
        4.0 → Number.Float
    """

    name = 'Shaderprep'
    aliases = ['shaderprep', 'wgslpp']
    filenames = ['*.wgsl']

    tokens = {
        'root': [
            # Block directives: condition follows on if
            (r'^(\s*)(//:)(%s)\b' % '|'.join(sorted(BLOCK_KEYWORDS)),
             bygroups(Whitespace, Comment.Preproc, Comment.Preproc), 'condition'),

            # const NAME
            (r'^(\s*)(//:)(const)(\s+)(\w+)',
             bygroups(Whitespace, Comment.Preproc, Comment.Preproc, Whitespace, Name.Constant)),

            # include path
            (r'^(\s*)(//:)(include)(\s+)(\S+)',
             bygroups(Whitespace, Comment.Preproc, Comment.Preproc, Whitespace, String)),

            # Unknown directive keywords still read as preprocessor lines
            (r'^(\s*)(//:\S*)', bygroups(Whitespace, Comment.Preproc)),

            # Ordinary comments
            (r'//.*?$', Comment.Single),
            (r'/\*', Comment.Multiline, 'block_comment'),

            # Attributes (@vertex, @group(0))
            (r'@\w+', Name.Decorator),

            (words(WGSL_KEYWORDS, suffix=r'\b'), Keyword),
            (words(WGSL_TYPES, suffix=r'\b'), Keyword.Type),
            (r'(true|false)\b', Keyword.Constant),

            (r'0[xX][0-9a-fA-F]+[iu]?', Number.Hex),
            (r'\d+\.\d*([eE][+-]?\d+)?[fh]?', Number.Float),
            (r'\d+[iu]?', Number.Integer),

            (r'[A-Za-z_]\w*', Name),
            (r'[-+*/%&|^!~<>=]+', Operator),
            (r'[{}()\[\];,.:]', Punctuation),
            (r'\n', Whitespace),
            (r'[ \t\r]+', Whitespace),
            (r'.', Text),
        ],

        'condition': [
            (r'\n', Whitespace, '#pop'),
            (r'(&&|\|\||==|!=|<=|>=|[<>!~+\-*/&|])', Operator),
            (r'[()]', Punctuation),
            (r'(true|false)\b', Keyword.Constant),
            (r'0[xXoObB][0-9a-fA-F_]+', Number.Hex),
            (r'\d[\d_]*\.[\d_]*([eE][+-]?\d+)?', Number.Float),
            (r'\d[\d_]*', Number.Integer),
            (r'[A-Za-z_]\w*', Name.Constant),
            (r'[ \t\r]+', Whitespace),
            (r'.', Text),
        ],

        'block_comment': [
            (r'\*/', Comment.Multiline, '#pop'),
            (r'[^*]+', Comment.Multiline),
            (r'\*', Comment.Multiline),
        ],
    }


def get_lexer() -> ShaderprepLexer:
    """
    Get the ShaderprepLexer instance

    Returns:
        ShaderprepLexer instance ready for use with Pygments
    """
    return ShaderprepLexer()
