"""Instruction prompts for generative parse endpoints."""

SYSTEM_PROMPT = """You are an expert at parsing financial transaction information from OCR text extracted from payment app screenshots (Google Pay, PhonePe, Paytm, etc.).

Extract the following information:
1. Amount (numeric value only, no currency symbols)
2. Merchant/Payee name
3. Transaction type (either "debit" or "credit")
4. Confidence score (0-100 based on clarity)

RULES:
- If amount is not found, set amount to 0
- If merchant is not found, set merchant to "Payment"
- Type should be "debit" for payments/sent money, "credit" for received/refund
- Confidence should be 0-100 based on how clear the information is
- Return ONLY valid JSON, nothing else"""

RESPONSE_FORMAT = """Respond ONLY with a valid JSON object in this exact format (no markdown, no explanation):
{
  "amount": <number>,
  "merchant": "<string>",
  "type": "<debit|credit>",
  "confidence": <0-100>
}"""


def build_generative_prompt(ocr_text: str) -> str:
    """Single-message prompt with the OCR text embedded."""
    return (
        f"{SYSTEM_PROMPT}\n\n"
        f"OCR Text:\n\"\"\"\n{ocr_text}\n\"\"\"\n\n"
        f"{RESPONSE_FORMAT}"
    )
