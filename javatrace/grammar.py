"""
grammar.py — Java-subset PEG grammars
=====================================

Two Parsimonious grammars over the same core rules:

``STRICT_GRAMMAR``
    Modifiers must be Java modifier keywords and annotation arguments
    must be well-formed element values.

``RELAXED_GRAMMAR``
    Tolerates unknown modifier words (``sealed``, ``non-sealed`` style
    contextual keywords, vendor extensions) wherever they precede a
    declaration, and accepts any balanced text as annotation arguments.

Conventions
-----------
* Every token consumes its trailing whitespace and comments (rule ``_``),
  so only ``compilation_unit`` starts with ``_``.
* Rules are never bare aliases (``a = b``): Parsimonious folds those into
  the referenced rule and the alias name would never be visited.
* Token rules are UPPER_CASE; syntactic rules are lower_case.

Usage::

    from javatrace.grammar import STRICT_GRAMMAR

    tree = STRICT_GRAMMAR.parse("class A { int f() { return 1; } }")
    expr = STRICT_GRAMMAR["expression"].parse("a + b * c")
"""

from __future__ import annotations

from parsimonious.grammar import Grammar

__all__ = ["STRICT_GRAMMAR", "RELAXED_GRAMMAR", "JAVA_KEYWORDS"]


JAVA_KEYWORDS = (
    "abstract", "assert", "boolean", "break", "byte", "case", "catch",
    "char", "class", "const", "continue", "default", "do", "double", "else",
    "enum", "extends", "final", "finally", "float", "for", "goto", "if",
    "implements", "import", "instanceof", "int", "interface", "long",
    "native", "new", "package", "private", "protected", "public", "return",
    "short", "static", "strictfp", "super", "switch", "synchronized", "this",
    "throw", "throws", "transient", "try", "void", "volatile", "while",
    "true", "false", "null",
)


# ═══════════════════════════════════════════════════════════════════
#  CORE RULES (shared by both grammars)
# ═══════════════════════════════════════════════════════════════════

_BASE_RULES = r'''
    # ─────────────────────────────────────────────────────────────
    # Compilation unit
    # ─────────────────────────────────────────────────────────────

    compilation_unit    = _ package_decl? import_decl* type_decl*
    package_decl        = annotation* PACKAGE qualified_name SEMI
    import_decl         = IMPORT STATIC? qualified_name import_star? SEMI
    import_star         = DOT STAR
    qualified_name      = identifier (DOT identifier)*

    type_decl           = class_decl / interface_decl / SEMI

    # ─────────────────────────────────────────────────────────────
    # Type declarations
    # ─────────────────────────────────────────────────────────────

    class_decl          = modifier* CLASS identifier type_params? superclass? interfaces? class_body
    interface_decl      = modifier* INTERFACE identifier type_params? extends_interfaces? class_body
    superclass          = EXTENDS class_type
    interfaces          = IMPLEMENTS type_list
    extends_interfaces  = EXTENDS type_list
    type_list           = class_type (COMMA class_type)*

    class_body          = LBRACE member_decl* RBRACE
    member_decl         = method_decl / constructor_decl / field_decl
                        / class_decl / interface_decl / initializer / SEMI

    method_decl         = modifier* type_params? result_type identifier formal_params dims throws_clause? method_body
    method_body         = block / SEMI
    constructor_decl    = modifier* type_params? identifier formal_params throws_clause? block
    initializer         = STATIC? block
    field_decl          = modifier* type variable_declarators SEMI

    formal_params       = LPAREN (formal_param (COMMA formal_param)*)? RPAREN
    formal_param        = variable_modifier* type ELLIPSIS? identifier dims
    throws_clause       = THROWS class_type (COMMA class_type)*

    variable_declarators = variable_declarator (COMMA variable_declarator)*
    variable_declarator = identifier dims variable_init?
    variable_init       = ASSIGN variable_initializer
    variable_initializer = array_initializer / expression
    array_initializer   = LBRACE (variable_initializer (COMMA variable_initializer)* COMMA?)? RBRACE

    # ─────────────────────────────────────────────────────────────
    # Types
    # ─────────────────────────────────────────────────────────────

    result_type         = VOID / type
    type                = (primitive_type / class_type) dims
    class_type          = class_type_part (DOT class_type_part)*
    class_type_part     = annotation* identifier type_args?
    type_args           = LT (type_arg (COMMA type_arg)*)? GT
    type_arg            = wildcard / type
    wildcard            = QUESTION wildcard_bound?
    wildcard_bound      = (EXTENDS / SUPER) type
    type_params         = LT type_param (COMMA type_param)* GT
    type_param          = annotation* identifier (EXTENDS class_type (AMP class_type)*)?
    dims                = dim*
    dim                 = LBRACKET RBRACKET

    # ─────────────────────────────────────────────────────────────
    # Blocks and statements
    # ─────────────────────────────────────────────────────────────

    block               = LBRACE block_stmt* RBRACE
    block_stmt          = local_var_stmt / class_decl / statement
    local_var_stmt      = local_var_decl SEMI
    local_var_decl      = variable_modifier* type variable_declarators

    statement           = block / if_stmt / for_stmt / while_stmt / return_stmt
                        / break_stmt / continue_stmt / empty_stmt / expr_stmt
    if_stmt             = IF LPAREN expression RPAREN statement else_clause?
    else_clause         = ELSE statement
    for_stmt            = FOR LPAREN for_init? SEMI expression? SEMI expression_list? RPAREN statement
    for_init            = local_var_decl / expression_list
    expression_list     = expression (COMMA expression)*
    while_stmt          = WHILE LPAREN expression RPAREN statement
    return_stmt         = RETURN expression? SEMI
    break_stmt          = BREAK identifier? SEMI
    continue_stmt       = CONTINUE identifier? SEMI
    empty_stmt          = ";" _
    expr_stmt           = expression SEMI

    # ─────────────────────────────────────────────────────────────
    # Expressions (lowest to highest precedence)
    # ─────────────────────────────────────────────────────────────

    expression          = assignment / conditional_expr
    assignment          = postfix_expr ASSIGN_OP expression
    conditional_expr    = or_expr (QUESTION expression COLON conditional_expr)?
    or_expr             = and_expr (OR_OP and_expr)*
    and_expr            = bit_or_expr (AND_OP bit_or_expr)*
    bit_or_expr         = bit_xor_expr (BIT_OR bit_xor_expr)*
    bit_xor_expr        = bit_and_expr (BIT_XOR bit_and_expr)*
    bit_and_expr        = equality_expr (BIT_AND equality_expr)*
    equality_expr       = relational_expr (EQ_OP relational_expr)*
    relational_expr     = shift_expr (REL_OP shift_expr)*
    shift_expr          = additive_expr (SHIFT_OP additive_expr)*
    additive_expr       = multiplicative_expr (ADD_OP multiplicative_expr)*
    multiplicative_expr = unary_expr (MUL_OP unary_expr)*

    unary_expr          = prefix_update / signed_expr / cast_expr / postfix_update / postfix_expr
    prefix_update       = INCDEC unary_expr
    signed_expr         = UNARY_OP unary_expr
    cast_expr           = (LPAREN primitive_type dims RPAREN unary_expr)
                        / (LPAREN class_type dims RPAREN !(ADD_OP / INCDEC) unary_expr)
    postfix_update      = postfix_expr INCDEC

    postfix_expr        = primary selector*
    selector            = member_selector / index_selector
    member_selector     = DOT identifier arguments?
    index_selector      = LBRACKET expression RBRACKET
    arguments           = LPAREN (expression (COMMA expression)*)? RPAREN

    primary             = paren_expr / literal / creation_expr / this_expr / invocation / name
    paren_expr          = LPAREN expression RPAREN
    invocation          = identifier arguments
    name                = identifier !LPAREN
    this_expr           = ~r"this(?![A-Za-z0-9_$])" _

    creation_expr       = object_creation / array_creation
    object_creation     = NEW class_type arguments class_body?
    array_creation      = NEW array_base (sized_dims / initialized_dims)
    array_base          = primitive_type / class_type
    sized_dims          = dim_expr+ dims
    initialized_dims    = dim+ array_initializer
    dim_expr            = LBRACKET expression RBRACKET

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    literal             = float_literal / int_literal / char_literal
                        / string_literal / bool_literal / null_literal
    float_literal       = ~r"(?:(?:\d[\d_]*)?\.\d[\d_]*(?:[eE][+-]?\d+)?[fFdD]?|\d[\d_]*[eE][+-]?\d+[fFdD]?|\d[\d_]*[fFdD])(?![\w$])" _
    int_literal         = ~r"(?:0[xX][0-9a-fA-F](?:[0-9a-fA-F_]*[0-9a-fA-F])?|0[bB][01](?:[01_]*[01])?|\d[\d_]*)[lL]?(?![\w$])" _
    char_literal        = ~r"'(?:[^'\\\n]|\\.)+'" _
    string_literal      = ~r'"(?:[^"\\\n]|\\.)*"' _
    bool_literal        = ~r"(?:true|false)(?![A-Za-z0-9_$])" _
    null_literal        = ~r"null(?![A-Za-z0-9_$])" _

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    identifier          = !keyword ~r"[A-Za-z_$][A-Za-z0-9_$]*" _
    keyword             = ~r"(?:abstract|assert|boolean|break|byte|case|catch|char|class|const|continue|default|do|double|else|enum|extends|final|finally|float|for|goto|if|implements|import|instanceof|int|interface|long|native|new|package|private|protected|public|return|short|static|strictfp|super|switch|synchronized|this|throw|throws|transient|try|void|volatile|while|true|false|null)(?![A-Za-z0-9_$])"
    primitive_type      = ~r"(?:boolean|byte|char|short|int|long|float|double)(?![A-Za-z0-9_$])" _
    MODIFIER_KW         = ~r"(?:public|protected|private|static|abstract|final|native|synchronized|transient|volatile|strictfp|default)(?![A-Za-z0-9_$])" _

    PACKAGE             = ~r"package(?![A-Za-z0-9_$])" _
    IMPORT              = ~r"import(?![A-Za-z0-9_$])" _
    STATIC              = ~r"static(?![A-Za-z0-9_$])" _
    CLASS               = ~r"class(?![A-Za-z0-9_$])" _
    INTERFACE           = ~r"interface(?![A-Za-z0-9_$])" _
    EXTENDS             = ~r"extends(?![A-Za-z0-9_$])" _
    IMPLEMENTS          = ~r"implements(?![A-Za-z0-9_$])" _
    SUPER               = ~r"super(?![A-Za-z0-9_$])" _
    THROWS              = ~r"throws(?![A-Za-z0-9_$])" _
    FINAL               = ~r"final(?![A-Za-z0-9_$])" _
    VOID                = ~r"void(?![A-Za-z0-9_$])" _
    IF                  = ~r"if(?![A-Za-z0-9_$])" _
    ELSE                = ~r"else(?![A-Za-z0-9_$])" _
    FOR                 = ~r"for(?![A-Za-z0-9_$])" _
    WHILE               = ~r"while(?![A-Za-z0-9_$])" _
    RETURN              = ~r"return(?![A-Za-z0-9_$])" _
    BREAK               = ~r"break(?![A-Za-z0-9_$])" _
    CONTINUE            = ~r"continue(?![A-Za-z0-9_$])" _
    NEW                 = ~r"new(?![A-Za-z0-9_$])" _

    ASSIGN_OP           = ~r"(?:>>>|<<|>>|[+\-*/%&|^])?=(?!=)" _
    ASSIGN              = ~r"=(?!=)" _
    OR_OP               = "||" _
    AND_OP              = "&&" _
    BIT_OR              = ~r"\|(?![|=])" _
    BIT_XOR             = ~r"\^(?!=)" _
    BIT_AND             = ~r"&(?![&=])" _
    EQ_OP               = ~r"==|!=" _
    REL_OP              = ~r"<=|>=|<(?![<=])|>(?![>=])" _
    SHIFT_OP            = ~r"(?:<<|>>>|>>)(?!=)" _
    ADD_OP              = ~r"\+(?![+=])|-(?![-=])" _
    MUL_OP              = ~r"[*/%](?!=)" _
    UNARY_OP            = ~r"!(?!=)|~|\+(?!\+)|-(?!-)" _
    INCDEC              = ~r"\+\+|--" _

    LPAREN              = "(" _
    RPAREN              = ")" _
    LBRACE              = "{" _
    RBRACE              = "}" _
    LBRACKET            = "[" _
    RBRACKET            = "]" _
    SEMI                = ";" _
    COMMA               = "," _
    ELLIPSIS            = "..." _
    DOT                 = ~r"\.(?!\.)" _
    LT                  = "<" _
    GT                  = ">" _
    QUESTION            = "?" _
    COLON               = ":" _
    STAR                = "*" _
    AMP                 = "&" _
    AT                  = "@" _

    _                   = ~r"(?:\s+|//[^\n]*|/\*[\s\S]*?\*/)*"
'''


# ═══════════════════════════════════════════════════════════════════
#  STRICT MODIFIERS AND ANNOTATIONS
# ═══════════════════════════════════════════════════════════════════

_STRICT_RULES = r'''
    modifier            = annotation / MODIFIER_KW
    variable_modifier   = annotation / FINAL

    annotation          = AT qualified_name annotation_args?
    annotation_args     = LPAREN (element_pairs / element_value)? RPAREN
    element_pairs       = element_pair (COMMA element_pair)*
    element_pair        = identifier ASSIGN element_value
    element_value       = annotation / element_array / conditional_expr
    element_array       = LBRACE (element_value (COMMA element_value)* COMMA?)? RBRACE
'''


# ═══════════════════════════════════════════════════════════════════
#  RELAXED MODIFIERS AND ANNOTATIONS
# ═══════════════════════════════════════════════════════════════════

# An unknown word counts as a modifier only when a declaration head
# (class/interface keyword, or "type name") follows the modifier run.
_RELAXED_RULES = r'''
    modifier            = annotation / MODIFIER_KW / soft_modifier
    soft_modifier       = identifier &(modifier* declaration_head)
    declaration_head    = CLASS / INTERFACE / (type_params? result_type identifier)

    variable_modifier   = annotation / FINAL / soft_variable_modifier
    soft_variable_modifier = identifier &(variable_modifier* type identifier)

    annotation          = AT qualified_name balanced_parens?
    balanced_parens     = LPAREN balanced_item* RPAREN
    balanced_item       = balanced_parens
                        / (~r'"(?:[^"\\\n]|\\.)*"' _)
                        / (~r"'(?:[^'\\\n]|\\.)+'" _)
                        / ~r"[^()\"']+"
'''


STRICT_GRAMMAR = Grammar(_BASE_RULES + _STRICT_RULES)
RELAXED_GRAMMAR = Grammar(_BASE_RULES + _RELAXED_RULES)
