import pytest

from cartwatch_core.page.html import HtmlDocument

PRODUCT_URL = "https://shop.example/p/wireless-mouse"

MOUSE_PAGE = """
<html>
<head><title>Wireless Mouse | Shop Example</title></head>
<body>
  <div class="product-card">
    <h2 class="product-title">Wireless Mouse</h2>
    <span class="price" data-price="29.99">$29.99</span>
    <button class="add-to-cart">Add to Cart</button>
  </div>
  <div class="header-cart"><span class="cart-count">0</span></div>
</body>
</html>
"""


@pytest.fixture
def make_doc():
    def _make(html: str, url: str = PRODUCT_URL) -> HtmlDocument:
        return HtmlDocument.from_html(html, url=url)
    return _make


@pytest.fixture
def mouse_doc(make_doc):
    return make_doc(MOUSE_PAGE)
