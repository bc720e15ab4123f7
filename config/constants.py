"""
Centralized constants for AI Bookmaker.
Page geometry, stamp geometry and typography used by every output adapter.
"""

# ===========================================
# PAGE GEOMETRY (A5 trim)
# ===========================================
PAGE_WIDTH_MM = 148
PAGE_HEIGHT_MM = 210
MARGIN_TOP_MM = 25
MARGIN_RIGHT_MM = 20
MARGIN_BOTTOM_MM = 17
MARGIN_LEFT_MM = 20
BODY_TEXT_INDENT_CM = 1.0             # first-line indent of body paragraphs

# ===========================================
# MERGE STAMPS (running header / page number)
# ===========================================
STAMP_HEADER_FONT = 'Helvetica'
STAMP_HEADER_SIZE = 8
STAMP_HEADER_COLOR = (0.0, 0.137, 0.4)  # royal blue
STAMP_HEADER_OFFSET_CM = 1.3          # from the top edge
STAMP_FOOTER_FONT = 'Helvetica-Bold'
STAMP_FOOTER_SIZE = 16
STAMP_FOOTER_OPACITY = 0.4
STAMP_FOOTER_OFFSET_CM = 1.35         # from the bottom edge

# ===========================================
# DOCX TYPOGRAPHY
# ===========================================
DOCX_BODY_FONT = 'Merriweather'
DOCX_HEADING_SANS_FONT = 'Merriweather Sans'
DOCX_BODY_SIZE_PT = 12.5
DOCX_BODY_SPACE_AFTER_PT = 8
DOCX_H1_SIZE_PT = 28
DOCX_H2_SIZE_PT = 22
DOCX_H3_SIZE_PT = 16
DOCX_FIRST_LINE_INDENT_TWIPS = 720    # 0.5 inch
DOCX_TOC_INDENT_TWIPS = 720
DOCX_CHAPTER_TITLE_SPACING_PT = 100
DOCX_COVER_TITLE_PT = 36
DOCX_COVER_SUBTITLE_PT = 18
DOCX_COVER_AUTHOR_PT = 14
DOCX_COPYRIGHT_PT = 9

# ===========================================
# GENERATION
# ===========================================
GENERATION_CHAPTER_COUNT = 10
GENERATION_SUBCHAPTER_COUNT = 3
GENERATION_MAX_TOKENS = 32768
GENERATION_TEMPERATURE = 0.7

# ===========================================
# RENDERING
# ===========================================
RENDER_CONCURRENCY = 1
RENDER_RETRIES = 2
PRINT_SERVER_TIMEOUT = 120            # seconds
CONTENT_HASH_LENGTH = 12

# ===========================================
# STORAGE PATHS
# ===========================================
PART_ARTIFACT_TEMPLATE = '{book_id}/parts/{part_index:04d}-{renderer}-{artifact_key}.pdf'
FINAL_ARTIFACT_TEMPLATE = '{book_id}/final/final.pdf'
FULL_PDF_TEMPLATE = '{book_id}/book.pdf'
DOCX_TEMPLATE = '{book_id}/book.docx'

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/bookmaker.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
