from zulu_assistant.services.catalog_service import Catalog, Category, Gallery
from zulu_assistant.services.resolver_service import (
    NO_CATEGORY_REPLY,
    NO_GALLERY_REPLY,
    Resolution,
    ResolverWeights,
    collect_gallery_links,
    gallery_link,
    gender_in_name,
    prepare_query,
    rank_categories,
    render_resolution,
    resolve,
    score_category,
)

WEIGHTS = ResolverWeights()


class TestScoreCategory:
    def test_exact_beats_substring_beats_word_overlap(self):
        exact = score_category("Table Lamps", "table lamps", weights=WEIGHTS)
        substring = score_category("Table Lamps Set", "table lamps", weights=WEIGHTS)
        overlap = score_category("Lamps & Lighting", "table lamps", weights=WEIGHTS)

        assert exact > substring > overlap > 0

    def test_exact_match_weights_add_up(self):
        # exact + name contains query + query contains name + two word hits
        assert score_category("Table Lamps", "table lamps", weights=WEIGHTS) == 100 + 50 + 30 + 20

    def test_query_contains_name(self):
        assert score_category("Lamps", "table lamps", weights=WEIGHTS) == 30 + 10

    def test_gender_bonus(self):
        with_gender = score_category("Men Shoes", "shoes", gender="men", weights=WEIGHTS)
        without = score_category("Men Shoes", "shoes", weights=WEIGHTS)
        assert with_gender - without == 20

    def test_men_does_not_boost_women(self):
        assert score_category("Women Shoes", "shoes", gender="men", weights=WEIGHTS) == score_category(
            "Women Shoes", "shoes", weights=WEIGHTS
        )

    def test_unrelated_scores_zero(self):
        assert score_category("Table Lamps", "sneakers", weights=WEIGHTS) == 0

    def test_custom_weights(self):
        weights = ResolverWeights(exact=1, name_contains_query=0, query_contains_name=0, word_overlap=0)
        assert score_category("Lamps", "lamps", weights=weights) == 1

    def test_gender_matches_as_substring_at_word_start(self):
        with_gender = score_category("Mens Shoes", "shoes", gender="men", weights=WEIGHTS)
        without = score_category("Mens Shoes", "shoes", weights=WEIGHTS)
        assert with_gender - without == 20

    def test_product_words_earn_containment(self):
        # typed query "i want a t-shirt" does not fit in the name, "t-shirt" does
        assert score_category(
            "Men T-Shirts", "i want a t-shirt", weights=WEIGHTS, product_words="t-shirt"
        ) == 50 + 10

    def test_typed_query_keeps_exact_bonus(self):
        assert score_category("Kids Toys", "Kids Toys", gender="kids", weights=WEIGHTS, product_words="toys") == (
            100 + 50 + 30 + 10 + 20
        )


class TestGenderInName:
    def test_word_start(self):
        assert gender_in_name("men", "Men T-Shirts")
        assert gender_in_name("men", "Mens Shoes")
        assert gender_in_name("kids", "Kidswear")

    def test_not_inside_a_word(self):
        assert not gender_in_name("men", "Women Shoes")


class TestPrepareQuery:
    def test_drops_filler_and_gender_words(self):
        assert prepare_query("I want a t-shirt for men!") == "t-shirt"

    def test_keeps_product_words(self):
        assert prepare_query("Show me table lamps please") == "table lamps"


class TestRankCategories:
    def test_top_three_only(self, catalog):
        ranked = rank_categories(catalog.categories, "t-shirts shoes", weights=WEIGHTS)
        assert len(ranked) <= 3

    def test_zero_scores_excluded(self, catalog):
        ranked = rank_categories(catalog.categories, "lamps", weights=WEIGHTS)
        assert [c.id for c in ranked] == ["6"]

    def test_ties_keep_table_order(self, catalog):
        ranked = rank_categories(catalog.categories, "t-shirt", weights=WEIGHTS)
        assert [c.id for c in ranked] == ["1", "2", "3"]

    def test_gender_breaks_ties(self, catalog):
        ranked = rank_categories(catalog.categories, "t-shirt", gender="women", weights=WEIGHTS)
        assert ranked[0].id == "2"


class TestGalleryLinks:
    def test_whitespace_becomes_percent_twenty(self):
        assert gallery_link("Sneaker  Street", "app.zulu.club/") == "app.zulu.club/Sneaker%20Street"

    def test_related_ids_and_dedup(self, catalog):
        links = collect_gallery_links(catalog, ["1", "4"], base_url="app.zulu.club/")
        assert links == [
            "app.zulu.club/Men%20Basics",
            "app.zulu.club/Graphic%20Tees",
            "app.zulu.club/Sneaker%20Street",
        ]

    def test_capped(self):
        galleries = tuple(
            Gallery(category_id="1", display_key=f"Gallery {i}", related_category_ids=()) for i in range(10)
        )
        catalog = Catalog(categories=(Category(id="1", name="Shoes"),), galleries=galleries)

        links = collect_gallery_links(catalog, ["1"], max_links=6)

        assert len(links) == 6
        assert all(" " not in link for link in links)


class TestResolve:
    def test_men_tshirt(self, catalog):
        resolution = resolve(catalog, "I want a t-shirt for men", gender="men", weights=WEIGHTS)

        assert resolution.categories[0].name == "Men T-Shirts"
        assert len(resolution.categories) <= 3
        assert 0 < len(resolution.gallery_links) <= 6
        assert all(" " not in link for link in resolution.gallery_links)

    def test_exact_name_with_gender_word_ranks_first(self):
        catalog = Catalog(
            categories=(Category(id="1", name="Toys"), Category(id="2", name="Kids Toys")),
            galleries=(),
        )

        resolution = resolve(catalog, "Kids Toys", gender="kids", weights=WEIGHTS)

        assert [c.name for c in resolution.categories] == ["Kids Toys", "Toys"]

    def test_nothing_found(self, catalog):
        resolution = resolve(catalog, "xylophone", weights=WEIGHTS)
        assert resolution.categories == ()
        assert resolution.gallery_links == ()


class TestRenderResolution:
    def test_no_categories(self):
        assert render_resolution(Resolution(), "xylophone") == NO_CATEGORY_REPLY

    def test_no_galleries(self):
        resolution = Resolution(categories=(Category(id="9", name="Vases"),))
        assert render_resolution(resolution, "vases") == NO_GALLERY_REPLY

    def test_lists_links(self):
        resolution = Resolution(
            categories=(Category(id="1", name="Men T-Shirts"),),
            gallery_links=("app.zulu.club/Men%20Basics",),
        )

        reply = render_resolution(resolution, "t-shirt for men", "men")

        assert "*t-shirt* picks for *men*" in reply
        assert "app.zulu.club/Men%20Basics" in reply
