import json

import pytest

from lydian_travel.schemas.content import ContentRequest, GeneratedContent
from lydian_travel.services import content_writer

from .conftest import API


def _request(**fields) -> ContentRequest:
    values = {
        "type": "hotel",
        "name": "Grand Otel",
        "location": "Antalya",
        "features": ["Havuz", "Spa", "Plaj", "Fitness"],
    }
    values.update(fields)
    return ContentRequest(**values)


@pytest.mark.parametrize("value, expected", [(12500, "12.500"), (950, "950"), (1234.5, "1.234,50")])
def test_format_price(value, expected):
    assert content_writer.format_price(value) == expected


def test_title_uses_one_of_the_type_templates():
    request = _request()
    candidates = [
        template.replace("{name}", "Grand Otel").replace("{location}", "Antalya")
        for template in content_writer.CONTENT_TEMPLATES["hotel"]["titles"]
    ]

    assert content_writer.generate_title(request) in candidates
    assert content_writer.generate_title(request) == content_writer.generate_title(_request())


def test_short_description():
    description = content_writer.generate_short_description(_request(features=["Havuz", "Spa"]))

    assert description == (
        "Antalya'da bulunan Grand Otel, Havuz, Spa ile misafirlerine eşsiz bir konaklama deneyimi sunar."
    )


def test_short_description_is_truncated():
    description = content_writer.generate_short_description(_request(name="Otel " * 40))

    assert len(description) == content_writer.SHORT_DESCRIPTION_LIMIT
    assert description.endswith("...")


def test_long_description_mentions_price_and_rating():
    description = content_writer.generate_long_description(_request(price=12500, rating=4.66))

    assert "₺12.500 başlayan fiyatlarla" in description
    assert "4.7/5.0 ortalama puan" in description
    assert description.endswith("%20'ye varan indirim kazanabilirsiniz.")


def test_highlights_mix_template_features_and_universal():
    highlights = content_writer.generate_highlights(_request())

    assert len(highlights) == 10
    assert highlights[5:8] == ["Havuz", "Spa", "Plaj"]
    assert highlights[8:] == content_writer.UNIVERSAL_HIGHLIGHTS[:2]


def test_seo_metadata():
    seo = content_writer.generate_seo_metadata(_request(category="Butik"))

    assert seo["seo_title"] == "Grand Otel Antalya | Travel LyDian - En Uygun Fiyatlar"
    assert seo["meta_description"] == (
        "Antalya'da Grand Otel için en uygun fiyatlar ve güvenli rezervasyon. Havuz, Spa. Hemen rezervasyon yapın!"
    )
    assert seo["keywords"][0] == "grand otel"
    assert seo["keywords"][-1] == "antalya butik"


@pytest.mark.parametrize(
    "fields, count",
    [({"price": 1500}, 5), ({}, 4), ({"type": "car"}, 4), ({"type": "tour"}, 4), ({"type": "transfer"}, 2)],
)
def test_faq_by_type(fields, count):
    faq = content_writer.generate_faq(_request(**fields))

    assert len(faq) == count
    assert faq[-1].question == "Ödeme seçenekleri nelerdir?"


@pytest.mark.parametrize(
    "fields, tone",
    [
        ({"type": "vehicle"}, "luxury"),
        ({"price": 6000}, "luxury"),
        ({"type": "property"}, "family-friendly"),
        ({"type": "tour"}, "casual"),
        ({"type": "car", "price": 900}, "professional"),
    ],
)
def test_tone(fields, tone):
    assert content_writer.determine_tone(_request(**fields)) == tone


def test_tags():
    tags = content_writer.generate_tags(_request(type="property", category="Villa"))

    assert tags == ["Antalya", "property", "Türkiye", "Villa", "kiralık ev", "villa", "yazlık", "apart"]


def test_generated_content_is_deterministic():
    first = content_writer.generate_content(_request(price=2500))
    second = content_writer.generate_content(_request(price=2500))

    assert first == second
    assert first.call_to_action


def test_quality_of_sparse_content():
    content = GeneratedContent(
        title="Kısa",
        short_description="",
        long_description="",
        highlights=["a", "b"],
        seo_title="",
        meta_description="Kısa açıklama",
        keywords=["tek"],
        faq=[],
        tags=[],
        call_to_action="",
        tone="professional",
    )

    quality = content_writer.calculate_quality(content)

    assert quality.score == 45
    assert quality.feedback[0] == "Başlık çok kısa, daha açıklayıcı olmalı"
    assert quality.feedback[-1] == "İçerik iyileştirme gerekiyor"


def test_generate_endpoint(client):
    response = client.post(
        f"{API}/content/generate",
        json={"type": "tour", "name": "Kapadokya Balon", "location": "Nevşehir", "features": ["Kahvaltı"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["tone"] == "casual"
    assert len(body["faq"]) == 4


def test_batch_endpoint(client):
    items = [
        {"type": "car", "name": "Fiat Egea", "location": "İzmir"},
        {"type": "transfer", "name": "VIP Vito", "location": "Dalaman"},
    ]

    response = client.post(f"{API}/content/batch", json={"items": items})

    assert response.status_code == 200
    assert len(response.json()) == 2
    assert client.post(f"{API}/content/batch", json={"items": []}).status_code == 422


def test_export_endpoint_keeps_turkish_characters(client):
    response = client.post(f"{API}/content/export", json={"type": "hotel", "name": "Göl Otel", "location": "Eğirdir"})

    assert response.headers["content-disposition"] == 'attachment; filename="content.json"'
    assert "Eğirdir" in response.text
    assert json.loads(response.text)["seo_title"].startswith("Göl Otel Eğirdir")


def test_preview_escapes_listing_text(client):
    response = client.post(
        f"{API}/content/preview",
        json={"type": "hotel", "name": "Otel <b>Mavi</b>", "location": "Bodrum"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Otel &lt;b&gt;Mavi&lt;/b&gt;" in response.text
    assert "<b>Mavi</b>" not in response.text


def test_unknown_content_type(client):
    assert client.post(f"{API}/content/generate", json={"type": "boat", "name": "X", "location": "Y"}).status_code == 422
