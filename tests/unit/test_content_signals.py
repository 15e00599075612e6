from foryou_runtime.domain.primitives.content_signals import ContentSignalConfig, extract_content_signals
from foryou_runtime.domain.primitives.content_signals.extractor import (
    extract_img_attributes,
    image_src_terms,
    strip_html_to_text,
)


def test_empty_inputs_yield_no_terms():
    """Test that missing and non-string inputs contribute nothing."""
    assert extract_content_signals() == []
    assert extract_content_signals(description_html=None, description=42, title=["x"]) == []


def test_priority_order_and_bigrams():
    """Test that image alt text comes before body text and bigrams follow their tokens."""
    html = '<p>Heavy cotton twill</p><img src="/files/raw-selvedge.jpg?v=3" alt="Indigo Wash">'
    terms = extract_content_signals(description_html=html, title="Straight Jeans")

    assert terms[:3] == ["indigo", "wash", "indigo_wash"]
    assert terms.index("raw") < terms.index("heavy")
    assert "selvedge" in terms
    assert "heavy_cotton" in terms
    assert "straight_jeans" in terms
    # image src tokens do not form bigrams
    assert "raw_selvedge" not in terms


def test_stopwords_numbers_and_short_tokens_dropped():
    """Test that stopwords, pure numbers and tokens under three characters are filtered."""
    terms = extract_content_signals(description="The 2024 men's tee for you by XO")
    assert terms == ["tee"]


def test_script_and_style_blocks_removed():
    """Test that script and style content never becomes a term."""
    html = "<style>.hidden{color:red}</style><script>var tracking = 1;</script><div>Organic linen</div>"
    assert strip_html_to_text(html.lower()) == "organic linen"
    terms = extract_content_signals(description_html=html)
    assert "tracking" not in terms
    assert "hidden" not in terms
    assert terms == ["organic", "linen", "organic_linen"]


def test_img_attribute_quoting_styles():
    """Test double, single and unquoted attribute values."""
    html = "<img alt=\"double quoted\"><img alt='single quoted'><img alt=bare src=a.png>"
    assert extract_img_attributes(html, "alt") == ["double quoted", "single quoted", "bare"]
    assert extract_img_attributes(html, "src") == ["a.png"]


def test_image_src_terms_strip_query_and_extension():
    """Test that only the filename stem of an image URL is tokenized."""
    terms = image_src_terms("https://cdn.example.com/products/black_wool_coat.webp?width=800", frozenset())
    assert terms == ["black", "wool", "coat"]


def test_output_is_deduplicated_and_bounded():
    """Test that terms are unique and capped at the configured maximum."""
    description = " ".join(f"word{i}" for i in range(60))
    terms = extract_content_signals(description=description, title="word1 word2")
    assert len(terms) == 28
    assert len(set(terms)) == len(terms)

    small = extract_content_signals(description=description, config=ContentSignalConfig(max_signal_terms=5))
    assert small == ["word0", "word1", "word2", "word3", "word4"]


def test_html_is_truncated_before_parsing():
    """Test that markup beyond the raw character cap is ignored."""
    html = "<p>" + ("padding " * 2000) + "</p><p>unreachable</p>"
    terms = extract_content_signals(description_html=html, config=ContentSignalConfig(max_signal_terms=100))
    assert "unreachable" not in terms
