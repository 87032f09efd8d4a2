from pdfminer.high_level import extract_text
from pdfminer.pdfparser import PDFSyntaxError
from loguru import logger


def extract_pdf_text(pdf_file, max_chars=20000) -> str:
    """
    Extracts text from a PDF path or file-like object using pdfminer.six.

    Args:
        pdf_file: A path or a file-like object (e.g., Flask uploaded file)
        max_chars: Upper bound on the returned text, to keep prompts small.

    Returns:
        Extracted text as a string, or an empty string when the PDF is
        unreadable or holds only scanned images.
    """
    try:
        text = extract_text(pdf_file) or ""
    except PDFSyntaxError as e:
        logger.warning(f"Could not read PDF {pdf_file}: {e}")
        return ""
    return text.strip()[:max_chars]
