import pytest

from foryou_runtime.adapters.debug.in_memory_debug_sink import InMemoryDebugSink
from foryou_runtime.domain.catalog.model import ProductCandidate, ProductImage
from foryou_runtime.domain.primitives.product_intelligence import (
    ProductIntelligence,
    ProductIntelligenceCache,
    ProductIntelligenceConfig,
    build_product_intelligence,
    classify_category,
    infer_primary_category,
    rules,
)
from foryou_runtime.domain.primitives.product_intelligence.classifier import image_filename_tokens


def make_candidate(
    handle: str,
    title: str = "",
    tags: list[str] | None = None,
    product_type: str = "",
    vendor: str = "",
    **kwargs,
) -> ProductCandidate:
    return ProductCandidate.new(
        handle=handle, title=title, tags=tags, product_type=product_type, vendor=vendor, **kwargs
    )


def test_denim_jeans_classified_as_denim():
    """Test that a denim-tagged jean is bottoms_denim with material and color tokens."""
    result = build_product_intelligence(
        make_candidate("blue-denim-jeans", title="Blue Denim Jeans", tags=["denim"])
    )
    assert result.primary_category == rules.BOTTOMS_DENIM
    assert result.sub_category == "jeans"
    assert result.confidence_score == pytest.approx(5.4 / 6.4, abs=1e-4)
    assert "denim" in result.material_tokens
    assert "blue" in result.color_tokens


def test_boxer_brief_classified_as_underwear():
    """Test that a boxer brief lands in underwear."""
    result = build_product_intelligence(make_candidate("cotton-boxer-brief", title="Cotton Boxer Brief"))
    assert result.primary_category == rules.UNDERWEAR
    assert result.material_tokens == ("cotton",)
    assert result.confidence_score == pytest.approx(5.2 / 6.2, abs=1e-4)


def test_no_keyword_hit_is_unknown_with_floor_confidence():
    """Test that a product with no category keyword is unknown at confidence 0.15."""
    result = build_product_intelligence(make_candidate("gift-card", title="Gift Card"))
    assert result.primary_category == rules.UNKNOWN
    assert result.confidence_score == 0.15
    assert result.sub_category is None
    assert not result.is_known


def test_weak_match_reports_confidence_but_stays_unknown():
    """Test that a top score below the minimum is unknown with the computed confidence."""
    single = classify_category(["boot"])
    # "boot" hits shoes for 2.0 -> confidence 2 / 3
    assert single.primary_category == rules.SHOES
    assert single.confidence_score == pytest.approx(2 / 3)

    strict = classify_category(["boot"], ProductIntelligenceConfig(min_top_score=2.5))
    assert strict.primary_category == rules.UNKNOWN
    assert strict.confidence_score == pytest.approx(2 / 3)
    assert strict.sub_category is None


def test_plural_keyword_hit_from_singular_term():
    """Test that a plural keyword scores 1.6 when only its singular form is present."""
    match = classify_category(["trouser"])
    # trouser (2.0) + trousers via singular (1.6)
    assert match.primary_category == rules.BOTTOMS_PANTS
    assert match.confidence_score == pytest.approx(3.6 / 4.6)
    assert match.sub_category == "trouser"


def test_phrase_hit_sets_sub_category():
    """Test that a multi-word phrase beats a single-word hit for the sub category."""
    match = classify_category(["denim", "wide leg"])
    assert match.primary_category == rules.BOTTOMS_DENIM
    assert match.sub_category == "wide_leg"
    assert match.confidence_score == pytest.approx((2 + 2.6 + 1.4) / (2 + 2.6 + 1.4 + 1))


def test_denim_and_underwear_suppress_each_other():
    """Test that the winner loses 0.8 when the mutually exclusive category also scored."""
    match = classify_category(["denim", "boxer"])
    top = 2 + 1.4 - 0.8
    second = 2 + 1.2
    assert match.primary_category == rules.BOTTOMS_DENIM
    assert match.confidence_score == pytest.approx(top / (top + second + 1))


def test_normalized_terms_sorted_by_weight_and_bounded():
    """Test that title terms outrank vendor terms and generic terms are dropped."""
    result = build_product_intelligence(
        make_candidate(
            "new-arrivals-wool-coat",
            title="Wool Coat",
            vendor="Northwind",
            tags=["sale", "winter"],
        )
    )
    terms = result.normalized_terms
    assert terms[0] in ("wool", "coat")
    assert terms.index("coat") < terms.index("northwind")
    assert "sale" not in terms
    assert "new" not in terms
    assert len(terms) <= 64
    assert result.primary_category == rules.OUTERWEAR
    assert result.use_case_tokens == ("winter",)


def test_image_filename_tokens():
    """Test that gallery filenames contribute tokens split on separators."""
    assert image_filename_tokens("https://cdn.example.com/a/Relaxed_Cargo-Pants.v2.JPG?x=1") == [
        "relaxed",
        "cargo",
        "pants",
    ]
    assert image_filename_tokens(None) == []
    assert image_filename_tokens("   ") == []


def test_gallery_images_feed_classification():
    """Test that image URLs alone can classify an otherwise bare product."""
    candidate = make_candidate(
        "sku-1001",
        images=[ProductImage(url="https://cdn.example.com/leather_belt_brown.jpg")],
    )
    result = build_product_intelligence(candidate)
    assert result.primary_category == rules.ACCESSORIES
    assert result.color_tokens == ("brown",)


def test_quality_score_formula():
    """Test the richness-based quality score."""
    result = build_product_intelligence(
        make_candidate("gift-card", title="Gift Card", product_type="Card", tags=["a", "b"])
    )
    expected = 0.2 + 0.1 + min(0.3, len(result.normalized_terms) / 80) + min(0.2, result.confidence_score * 0.2)
    assert result.quality_score == pytest.approx(round(expected, 4))
    assert 0.0 <= result.quality_score <= 1.0


def test_build_never_raises():
    """Test that a broken candidate degrades to an unknown classification."""

    class Broken:
        handle = "broken"

        @property
        def title(self):
            raise RuntimeError("boom")

    result = build_product_intelligence(Broken())
    assert result == ProductIntelligence.unknown()


def test_infer_primary_category():
    """Test the category convenience wrapper."""
    assert infer_primary_category(make_candidate("zip-hoodie", title="Zip Hoodie")) == rules.TOPS_HOODIES


def test_cache_returns_identical_object():
    """Test that repeat lookups by the same normalized handle hit the cache."""
    cache = ProductIntelligenceCache()
    first = cache.get(make_candidate("Blue-Denim-Jeans", title="Blue Denim Jeans"))
    second = cache.get(make_candidate(" blue-denim-jeans ", title="Something else entirely"))
    assert first is second
    assert len(cache) == 1
    assert "blue-denim-jeans" in cache


def test_cache_evicts_oldest_inserted():
    """Test that the cache stays bounded and drops its oldest entry first."""
    cache = ProductIntelligenceCache(ProductIntelligenceConfig(cache_size=3))
    for i in range(4):
        cache.get(make_candidate(f"product-{i}", title="Tee"))
    assert len(cache) == 3
    assert "product-0" not in cache
    assert "product-3" in cache


def test_cache_falls_back_to_id_and_skips_keyless():
    """Test id keying when the handle is blank, and no caching without any key."""
    cache = ProductIntelligenceCache()
    by_id = make_candidate("", title="Tee", id="gid://shopify/Product/9")
    assert cache.get(by_id) is cache.get(by_id)
    assert "gid://shopify/product/9" in cache

    keyless = ProductCandidate(id="", handle="", title="Tee")
    cache.get(keyless)
    assert len(cache) == 1


def test_cache_publishes_limited_samples():
    """Test that only the first few builds are offered to an enabled debug sink."""
    sink = InMemoryDebugSink()
    cache = ProductIntelligenceCache(ProductIntelligenceConfig(debug_sample_limit=2), debug_sink=sink)
    for i in range(4):
        cache.get(make_candidate(f"tee-{i}", title="Graphic Tee"))
    samples = sink.of_kind(rules.SAMPLE_KIND)
    assert [s["handle"] for s in samples] == ["tee-0", "tee-1"]
    assert samples[0]["primary_category"] == rules.TOPS_SHIRTS
