from sleuth.orchestrator.contracts import MODE_HOTDOG, MODE_STANDARD

PROMPT_STANDARD = (
    "Identify the primary object centered in this image. The surrounding context is useful "
    "for identification but focus your answer on the center subject.\n"
    "Respond with ONLY raw JSON — no markdown, no code fences, no explanation outside the JSON:\n"
    '{"name":"","category":"","description":"One to two sentences about what it is.",'
    '"fun_fact":"One genuinely interesting fact about it."}'
)

PROMPT_HOTDOG = (
    "Is there a hot dog in this image? A hot dog is specifically a cooked sausage served in a sliced bun.\n"
    "Respond with ONLY raw JSON — no markdown, no code fences:\n"
    '{"result":"HOT DOG" or "NOT HOT DOG","reason":"One short, blunt sentence in the deadpan '
    'style of Jian-Yang from Silicon Valley."}'
)

PROMPTS: dict[str, str] = {
    MODE_STANDARD: PROMPT_STANDARD,
    MODE_HOTDOG: PROMPT_HOTDOG,
}

# Canned replies used by the dev-mode transport
MOCK_REPLIES: dict[str, str] = {
    MODE_STANDARD: (
        '{"name":"Mechanical Keyboard","category":"Technology",'
        '"description":"A mechanical keyboard uses individual switches beneath each key for tactile '
        'feedback. Popular among programmers and gamers.",'
        '"fun_fact":"The first computer keyboard was derived from the typewriter, which itself was '
        'invented in 1868."}'
    ),
    MODE_HOTDOG: '{"result":"NOT HOT DOG","reason":"This is a keyboard. Not a hot dog."}',
}
