from app.domain.models.product import ProductType

def system_prompt() -> str:
    return (
        "You write catalogue entries for an inventory system. "
        "Return strict JSON only."
    )

def user_task(qr_code_id: str, product_type: ProductType) -> str:
    output_format = '{"name":"<short product name>","description":"<one or two sentences>"}'

    constraints = (
        "RULES:\n"
        "- Name: ≤8 words, no QR code in the name\n"
        "- Description: ≤40 words, factual, no prices\n"
        "- Use ONLY the provided CONTEXT, do not invent brands\n"
        "- Format: strict JSON"
    )

    return (
        "Propose a catalogue name and description for a newly scanned product.\n\n"
        f"CONTEXT:\n- qr_code_id: {qr_code_id}\n- product_type: {product_type.value}\n\n" +
        constraints + "\n\n" +
        "OUTPUT FORMAT: " + output_format
    )
