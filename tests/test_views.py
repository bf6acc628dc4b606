"""
HTTP surface tests: JSON block, HTML block, add-to-cart redirect, cart view
"""

import pytest
from django.contrib.messages import get_messages
from django.urls import reverse

from buytogether.models import Cart, CartItem

pytestmark = pytest.mark.django_db


@pytest.fixture
def frequent_set(make_variation, make_order):
    a = make_variation(title="Apples", price="2.99")
    b = make_variation(title="Carrots", price="1.49")
    c = make_variation(title="Leeks", price="2.20")
    d = make_variation(title="Bread", price="3.10")
    make_order([a, b, c, d])
    make_order([d, c, b, a])
    make_order([a, b])
    return [a, b, c, d]


def _add_url(ids):
    return reverse("buy-together-add-to-cart", kwargs={"product_ids": ",".join(str(i) for i in ids)})


def _messages(response):
    return [m.message for m in get_messages(response.wsgi_request)]


class TestBuyTogetherView:

    def test_empty_history(self, client, store):
        res = client.get(reverse("buy-together"))
        assert res.status_code == 200
        body = res.json()
        assert body["products"] == []
        assert body["add_to_cart_url"] == ""
        assert body["message"] == "No products to display."

    def test_block_payload(self, client, frequent_set):
        res = client.get(reverse("buy-together"))
        assert res.status_code == 200
        body = res.json()

        assert [p["title"] for p in body["products"]] == ["Apples", "Carrots", "Leeks"]
        assert [p["price"] for p in body["products"]] == ["$2.99", "$1.49", "$2.20"]
        assert body["total_price"] == "$6.68"
        assert body["add_to_cart_url"] == _add_url([v.pk for v in frequent_set[:3]])
        assert body["products"][0]["image"] == ""

    def test_image_urls_are_absolute(self, client, frequent_set):
        frequent_set[0].product.images.create(image="product_images/apples.jpg")
        body = client.get(reverse("buy-together")).json()
        assert body["products"][0]["image"] == "http://testserver/media/product_images/apples.jpg"


class TestBuyTogetherBlock:

    def test_renders_products(self, client, frequent_set):
        res = client.get(reverse("buy-together-block"))
        assert res.status_code == 200
        html = res.content.decode()
        assert "Apples" in html and "Leeks" in html
        assert "Bread" not in html
        assert "$6.68" in html
        assert _add_url([v.pk for v in frequent_set[:3]]) in html

    def test_renders_empty_state(self, client, store):
        html = client.get(reverse("buy-together-block")).content.decode()
        assert "No products to display." in html
        assert "Add all to cart" not in html


class TestAddToCartView:

    def test_adds_and_redirects_to_cart(self, client, frequent_set):
        ids = [v.pk for v in frequent_set[:3]]
        res = client.get(_add_url(ids))

        assert res.status_code == 302
        assert res["Location"] == reverse("cart")
        cart = Cart.objects.get()
        assert list(CartItem.objects.filter(cart=cart).values_list("purchased_entity_id", flat=True)) == ids
        assert _messages(res) == ["3 product(s) added to your cart."]

    def test_session_cart_is_reused(self, client, frequent_set):
        client.get(_add_url([frequent_set[0].pk]))
        client.get(_add_url([frequent_set[1].pk]))

        assert Cart.objects.count() == 1
        assert CartItem.objects.count() == 2

    def test_session_key_header(self, client, frequent_set):
        client.get(_add_url([frequent_set[0].pk]), HTTP_X_SESSION_KEY="guest-1")
        client.get(_add_url([frequent_set[0].pk]), HTTP_X_SESSION_KEY="guest-1")

        cart = Cart.objects.get()
        assert cart.session_key == "guest-1"
        assert cart.items.count() == 2

    def test_partial_failure_still_redirects(self, client, frequent_set):
        v = frequent_set[0]
        res = client.get(_add_url([v.pk, 999999, v.pk]))

        assert res.status_code == 302
        assert CartItem.objects.filter(purchased_entity=v).count() == 2
        assert _messages(res) == ["1 product(s) are no longer available and were not added."]

    def test_without_store_still_redirects(self, client, db):
        res = client.get(_add_url([1, 2]))
        assert res.status_code == 302
        assert Cart.all_objects.count() == 0
        assert _messages(res) == ["Your cart could not be opened."]

    def test_authenticated_user_cart(self, client, frequent_set, django_user_model):
        user = django_user_model.objects.create_user(username="ana", password="secret")
        client.force_login(user)
        client.get(_add_url([frequent_set[0].pk]))

        cart = Cart.objects.get()
        assert cart.user == user
        assert cart.session_key is None

    def test_redirect_target_from_settings(self, client, settings, frequent_set):
        settings.BUY_TOGETHER = {**settings.BUY_TOGETHER, "CART_REDIRECT_URL": "/cart"}
        res = client.get(_add_url([frequent_set[0].pk]))
        assert res["Location"] == "/cart"


class TestCartView:

    def test_lists_added_items(self, client, frequent_set):
        client.get(_add_url([frequent_set[0].pk, frequent_set[1].pk]), HTTP_X_SESSION_KEY="guest-1")
        res = client.get(reverse("cart"), HTTP_X_SESSION_KEY="guest-1")

        assert res.status_code == 200
        body = res.json()
        assert [i["title"] for i in body["items"]] == ["Apples", "Carrots"]
        assert body["total_price"] == "4.48"

    def test_no_store(self, client, db):
        res = client.get(reverse("cart"), HTTP_X_SESSION_KEY="guest-1")
        assert res.status_code == 400


class TestProductDetail:

    def test_canonical_url_resolves(self, client, frequent_set):
        product = frequent_set[0].product
        res = client.get(product.get_absolute_url())
        assert res.status_code == 200
        assert res.json()["title"] == "Apples"
