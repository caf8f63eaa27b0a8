"""
Prompt templates for the three analysis stages.

Templates are rendered with str.format, so OCR text is substituted verbatim.
"""

from .schemas import DocumentCategory

DETECTION_PROMPT = """\
You are a document analysis expert specializing in Latvian business documents.
Analyze the following OCR text and determine the document type.

Document types:
- Invoice (rēķins): Contains billing information, payment terms, and usually has line items with prices.
- Delivery Note (pavadzīme): Documents goods being delivered, may reference an invoice, focuses on items delivered.
- Receipt (čeks): Typically shorter, issued at point of sale, often has a simpler format than invoices.

OCR Text:
{text}

Determine the document type based on the content, structure, and any explicit mentions.
If the document is ambiguous, look for key indicators:
- Invoices typically mention payment terms, due dates, and have "Rēķins" or "Invoice" in the title.
- Delivery notes focus on delivered items and may mention "Pavadzīme" or "Delivery Note".
- Receipts are usually shorter, from retail establishments, and may mention "Čeks" or "Receipt".

Give a confidence between 0 and 1 and a short reasoning.
"""

SUMMARY_FOCUS = {
    DocumentCategory.INVOICE: "parties involved, total amounts, payment terms, and key dates",
    DocumentCategory.DELIVERY_NOTE: "items delivered, delivery dates, and parties involved",
    DocumentCategory.RECEIPT: "the merchant, purchased items, and total amounts",
}

SUMMARY_PROMPT = """\
You are a document summarization expert.
Provide a concise summary of the following {document_type} document.

OCR Text:
{text}

Focus on the key information relevant to this type of document: {focus}.

Provide a concise summary in 3-5 sentences.
"""

EXTRACTION_PROMPT = """\
You are a document data extraction expert specializing in Latvian business documents.
Extract structured information from the following {document_type} OCR text.

OCR Text:
{text}

Guidelines for extraction:
1. Reconstruct the document structure, especially tables and line items.
2. For tables, identify column headers and align values correctly.
3. Validate data integrity (e.g., check if quantity × price = total).
4. For dates, use YYYY-MM-DD format.
5. For numbers, extract as numeric values (without currency symbols).
6. Pay special attention to distinguishing between seller and buyer information.
7. For Latvian documents, look for terms like "Pārdevējs" (Seller) and "Pircējs" (Buyer).
8. VAT may be referred to as "PVN" in Latvian documents.

If an optional field is not found in the document, leave it as null.
"""


def render_detection_prompt(text: str) -> str:
    return DETECTION_PROMPT.format(text=text)


def render_summary_prompt(text: str, category: DocumentCategory) -> str:
    return SUMMARY_PROMPT.format(
        document_type=category.label.lower(),
        text=text,
        focus=SUMMARY_FOCUS[category],
    )


def render_extraction_prompt(text: str, category: DocumentCategory) -> str:
    return EXTRACTION_PROMPT.format(document_type=category.label.lower(), text=text)
