"""Template-driven listing copy (titles, descriptions, SEO metadata and FAQ) in Turkish.

Template variants are chosen from a stable hash of the listing name, so the same
request always yields the same content.
"""

import json
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from lydian_travel.schemas.content import ContentQuality, ContentRequest, FAQItem, GeneratedContent

BRAND = "Travel LyDian"

CONTENT_TEMPLATES: Dict[str, Dict[str, List[str]]] = {
    "hotel": {
        "titles": [
            "{name} - {location} | Konforlu Konaklama",
            "{name} {location} - En İyi Otel Seçenekleri",
            "{location} {name} - Unutulmaz Tatil Deneyimi",
        ],
        "intros": [
            "{location}'da bulunan {name}, {features} ile misafirlerine eşsiz bir konaklama deneyimi sunar.",
            "{name}, {location}'ın kalbinde yer alan, {features} özellikleriyle dikkat çeken bir oteldir.",
            "{location}'da tatil planlarınız için ideal seçim olan {name}, {features} ile konforlu bir konaklama sağlar.",
        ],
        "highlights": [
            "Modern ve konforlu odalar",
            "Merkezi konum",
            "Profesyonel hizmet anlayışı",
            "7/24 resepsiyon hizmeti",
            "Güvenli park alanı",
            "Ücretsiz Wi-Fi",
            "Zengin kahvaltı seçenekleri",
        ],
    },
    "car": {
        "titles": [
            "{name} Araç Kiralama - {location}",
            "{location}'da {name} Kirala",
            "{name} - Ekonomik Araç Kiralama | {location}",
        ],
        "intros": [
            "{location}'da {name} araç kiralama hizmeti, {features} ile yolculuğunuzu konforlu hale getirir.",
            "{name} ile {location}'da özgürce seyahat edin. {features} özellikleriyle güvenli bir sürüş deneyimi.",
            "{location} geziniz için ideal seçim {name}. {features} ile keyifli bir yolculuk sizi bekliyor.",
        ],
        "highlights": [
            "Düzenli bakım yapılmış araçlar",
            "Kasko sigortası dahil",
            "Sınırsız kilometre",
            "Havalimanı teslimat",
            "7/24 yol yardım",
            "Temiz ve hijyenik araçlar",
            "Esnek kiralama süreleri",
        ],
    },
    "tour": {
        "titles": [
            "{name} Turu - {location}",
            "{location} {name} - Rehberli Tur",
            "{name} | {location} Gezisi",
        ],
        "intros": [
            "{location}'da unutulmaz bir deneyim sunan {name}, {features} ile size özel anlar yaşatır.",
            "{name} ile {location}'ın en güzel yerlerini keşfedin. {features} eşliğinde muhteşem bir gezi.",
            "{location}'ın kültürünü ve güzelliklerini {name} ile tanıyın. {features} dahildir.",
        ],
        "highlights": [
            "Profesyonel rehber eşliğinde",
            "Giriş ücretleri dahil",
            "Öğle yemeği ikramı",
            "Ulaşım sağlanır",
            "Fotoğraf çekim imkanı",
            "Küçük grup turları",
            "Yerel lezzetler tadımı",
        ],
    },
    "transfer": {
        "titles": [
            "{location} Transfer Hizmeti - {name}",
            "{name} - Güvenli Transfer | {location}",
            "{location} Havalimanı Transferi - {name}",
        ],
        "intros": [
            "{location}'da {name} transfer hizmeti ile güvenli ve konforlu ulaşım. {features} ile hizmetinizdeyiz.",
            "{name}, {location}'da profesyonel transfer çözümleri sunar. {features} dahildir.",
            "{location}'da zamanında ve güvenli ulaşım için {name}. {features} ile kaliteli hizmet.",
        ],
        "highlights": [
            "Havalimanı karşılama",
            "Profesyonel sürücü",
            "Lüks araç filosu",
            "Zamanında teslimat",
            "Meet & Greet hizmeti",
            "Bagaj yardımı",
            "7/24 destek hattı",
        ],
    },
    "vehicle": {
        "titles": [
            "{name} Şoförlü Araç - {location}",
            "{location} {name} Kiralama | Şoförlü",
            "{name} - VIP Transfer Hizmeti | {location}",
        ],
        "intros": [
            "{location}'da {name} şoförlü araç hizmeti, {features} ile konforlu yolculuklar sunar.",
            "{name} ile {location}'da profesyonel sürücü eşliğinde seyahat edin. {features} dahildir.",
            "{location}'da VIP transfer için {name}. {features} ile özel hizmet.",
        ],
        "highlights": [
            "Deneyimli profesyonel sürücü",
            "Lüks araç seçenekleri",
            "Şehir içi/dışı hizmet",
            "Günlük/saatlik kiralama",
            "Özel etkinlik transferi",
            "Kurumsal çözümler",
            "VIP protokol hizmeti",
        ],
    },
    "property": {
        "titles": [
            "{name} - {location} | Kiralık Ev",
            "{location}'da {name} - Tatil Evi",
            "{name} Kiralık Villa - {location}",
        ],
        "intros": [
            "{location}'da yer alan {name}, {features} ile ailenizle unutulmaz tatil yapabileceğiniz bir mekandır.",
            "{name}, {location}'da konforlu ve huzurlu bir tatil için ideal. {features} mevcuttur.",
            "{location}'da tatil eviniz {name}, {features} ile size özel bir deneyim sunar.",
        ],
        "highlights": [
            "Geniş ve ferah odalar",
            "Tam donanımlı mutfak",
            "Özel bahçe/balkon",
            "Yüzme havuzu",
            "Güvenli site içinde",
            "Denize yakın konum",
            "Aile dostu ortam",
        ],
    },
}

UNIVERSAL_HIGHLIGHTS = ["Müşteri memnuniyeti garantisi", "Kolay rezervasyon sistemi", "7/24 destek hizmeti"]

TYPE_TAGS = {
    "hotel": ["konaklama", "tatil", "otel rezervasyon"],
    "car": ["araç kiralama", "rent a car", "ekonomik araç"],
    "tour": ["tur", "gezi", "aktivite", "rehberli tur"],
    "transfer": ["transfer", "havalimanı", "ulaşım"],
    "vehicle": ["şoförlü araç", "vip transfer", "chauffeur"],
    "property": ["kiralık ev", "villa", "yazlık", "apart"],
}

DEFAULT_FEATURES = "modern özellikler"
SHORT_DESCRIPTION_LIMIT = 200
LUXURY_PRICE = 5000


def _variant(options: Sequence[str], seed: str) -> str:
    return options[zlib.crc32(seed.encode("utf-8")) % len(options)]


def _fill(template: str, request: ContentRequest, features: str = "") -> str:
    return (
        template.replace("{name}", request.name)
        .replace("{location}", request.location)
        .replace("{features}", features)
        .replace("{category}", request.category or "")
    )


def format_price(value: float) -> str:
    """Turkish thousands grouping: 12500 -> ``12.500``."""
    if float(value).is_integer():
        return f"{int(value):,}".replace(",", ".")
    whole, fraction = f"{value:,.2f}".split(".")
    return f"{whole.replace(',', '.')},{fraction}"


def generate_title(request: ContentRequest) -> str:
    return _fill(_variant(CONTENT_TEMPLATES[request.type]["titles"], request.name), request)


def generate_short_description(request: ContentRequest) -> str:
    features = ", ".join(request.features[:3]) or DEFAULT_FEATURES
    description = _fill(CONTENT_TEMPLATES[request.type]["intros"][0], request, features)
    if len(description) > SHORT_DESCRIPTION_LIMIT:
        return description[: SHORT_DESCRIPTION_LIMIT - 3] + "..."
    return description


def generate_long_description(request: ContentRequest) -> str:
    features = ", ".join(request.features) or DEFAULT_FEATURES
    intro = _variant(CONTENT_TEMPLATES[request.type]["intros"], request.name + ":intro")
    parts = [_fill(intro, request, features)]
    if request.price:
        parts.append(
            f"Uygun fiyat seçenekleri ile ₺{format_price(request.price)} başlayan fiyatlarla hizmet vermektedir."
        )
    if request.rating:
        parts.append(f"Misafirlerimizden {request.rating:.1f}/5.0 ortalama puan almıştır.")
    parts.append(
        f"{request.location}'da kaliteli ve güvenilir hizmet arayanlar için {request.name} ideal bir seçimdir. "
        "Rezervasyonunuzu hemen yapın ve avantajlı fiyatlardan yararlanın!"
    )
    parts.append(
        f"{BRAND}'ın paket fiyatlandırma sistemi ile diğer hizmetlerle birleştirerek "
        "%20'ye varan indirim kazanabilirsiniz."
    )
    return " ".join(parts)


def generate_highlights(request: ContentRequest) -> List[str]:
    highlights = list(CONTENT_TEMPLATES[request.type]["highlights"][:5])
    highlights.extend(request.features[:3])
    highlights.extend(UNIVERSAL_HIGHLIGHTS)
    return highlights[:10]


def generate_seo_metadata(request: ContentRequest) -> Dict[str, object]:
    name = request.name.lower()
    location = request.location.lower()
    feature_text = ", ".join(request.features[:2])
    meta_description = f"{request.location}'da {request.name} için en uygun fiyatlar ve güvenli rezervasyon."
    if feature_text:
        meta_description += f" {feature_text}."
    meta_description += " Hemen rezervasyon yapın!"

    keywords = [
        name,
        f"{location} {request.type}",
        f"{location} tatil",
        f"{name} rezervasyon",
        f"{location} gezilecek yerler",
    ]
    if request.category:
        keywords.append(f"{location} {request.category.lower()}")

    return {
        "seo_title": f"{request.name} {request.location} | {BRAND} - En Uygun Fiyatlar",
        "meta_description": meta_description,
        "keywords": keywords,
    }


def generate_faq(request: ContentRequest) -> List[FAQItem]:
    faq: List[FAQItem] = []
    if request.type == "hotel":
        faq.append(
            FAQItem(
                question=f"{request.name} nerede bulunmaktadır?",
                answer=(
                    f"{request.name}, {request.location}'da merkezi bir konumda yer almaktadır. "
                    "Ana turistik bölgelere ve ulaşım noktalarına yakındır."
                ),
            )
        )
        faq.append(
            FAQItem(
                question=f"{request.name} için rezervasyon nasıl yapılır?",
                answer=(
                    f"{BRAND} üzerinden online olarak güvenli rezervasyon yapabilirsiniz. "
                    "Tarih ve misafir sayısını seçtikten sonra anında onay alırsınız."
                ),
            )
        )
        if request.price:
            faq.append(
                FAQItem(
                    question=f"{request.name} fiyatları ne kadardır?",
                    answer=(
                        f"{request.name} için fiyatlar ₺{format_price(request.price)} başlamaktadır. "
                        "Erken rezervasyon ve paket rezervasyon ile %20'ye varan indirim kazanabilirsiniz."
                    ),
                )
            )
    elif request.type == "car":
        faq.append(
            FAQItem(
                question=f"{request.location}'da araç kiralama için gerekli belgeler nelerdir?",
                answer=(
                    "Geçerli sürücü belgesi, kimlik belgesi ve kredi kartı gereklidir. "
                    "Yabancı uyruklu misafirler için pasaport ve uluslararası sürücü belgesi."
                ),
            )
        )
        faq.append(
            FAQItem(
                question="Sigorta kapsamı nedir?",
                answer=(
                    "Kasko sigortası ve zorunlu trafik sigortası kiralama ücretine dahildir. "
                    "İsteğe bağlı tam kapsamlı sigorta seçenekleri mevcuttur."
                ),
            )
        )
    elif request.type == "tour":
        faq.append(
            FAQItem(
                question=f"{request.name} turu kaç saat sürmektedir?",
                answer=(
                    "Tur süresi genellikle 4-8 saat arasında değişmektedir. "
                    "Detaylı program bilgisi rezervasyon sırasında paylaşılır."
                ),
            )
        )
        faq.append(
            FAQItem(
                question="Tur ücreti neleri kapsar?",
                answer=(
                    "Rehberlik hizmeti, ulaşım, giriş ücretleri ve belirtilen yemekler tur ücretine dahildir. "
                    "Kişisel harcamalar dahil değildir."
                ),
            )
        )

    faq.append(
        FAQItem(
            question="İptal politikası nedir?",
            answer=(
                "Rezervasyon tarihinden 24-48 saat öncesine kadar ücretsiz iptal edebilirsiniz. "
                "Detaylı iptal koşulları rezervasyon sırasında gösterilir."
            ),
        )
    )
    faq.append(
        FAQItem(
            question="Ödeme seçenekleri nelerdir?",
            answer=(
                "Kredi kartı, banka kartı ile güvenli ödeme yapabilirsiniz. "
                "Tüm ödemeler 3D Secure ile korunmaktadır. Lydian Miles ile de ödeme yapabilirsiniz."
            ),
        )
    )
    return faq


def generate_tags(request: ContentRequest) -> List[str]:
    tags = [request.location, request.type, "Türkiye"]
    if request.category:
        tags.append(request.category)
    tags.extend(TYPE_TAGS.get(request.type, []))
    return tags


def determine_tone(request: ContentRequest) -> str:
    if request.type == "vehicle" or (request.price and request.price > LUXURY_PRICE):
        return "luxury"
    if request.type == "property":
        return "family-friendly"
    if request.type == "tour":
        return "casual"
    return "professional"


def generate_call_to_action(request: ContentRequest) -> str:
    options = [
        f"{request.name} için hemen rezervasyon yapın ve avantajlı fiyatlardan yararlanın!",
        f"{request.location} tatiliniz için {request.name}'i tercih edin. Şimdi rezerve edin!",
        f"En uygun fiyatlarla {request.name} rezervasyonu için tıklayın!",
        f"{request.name} ile unutulmaz bir deneyim için bugün rezervasyon yapın!",
        f"{BRAND}'ın paket fiyatlandırma sistemi ile {request.name} + diğer hizmetleri birleştirin, %20 indirim kazanın!",
    ]
    return _variant(options, request.name + ":cta")


def generate_content(request: ContentRequest) -> GeneratedContent:
    seo = generate_seo_metadata(request)
    return GeneratedContent(
        title=generate_title(request),
        short_description=generate_short_description(request),
        long_description=generate_long_description(request),
        highlights=generate_highlights(request),
        seo_title=seo["seo_title"],
        meta_description=seo["meta_description"],
        keywords=seo["keywords"],
        faq=generate_faq(request),
        tags=generate_tags(request),
        call_to_action=generate_call_to_action(request),
        tone=determine_tone(request),
    )


def generate_batch(requests: Sequence[ContentRequest]) -> List[GeneratedContent]:
    return [generate_content(request) for request in requests]


def calculate_quality(content: GeneratedContent) -> ContentQuality:
    score = 100
    feedback: List[str] = []

    if len(content.title) < 40:
        score -= 10
        feedback.append("Başlık çok kısa, daha açıklayıcı olmalı")
    elif len(content.title) > 70:
        score -= 5
        feedback.append("Başlık biraz uzun, kısaltılabilir")

    if len(content.meta_description) < 120:
        score -= 10
        feedback.append("Meta açıklama çok kısa")
    elif len(content.meta_description) > 170:
        score -= 5
        feedback.append("Meta açıklama çok uzun")

    if len(content.highlights) < 5:
        score -= 15
        feedback.append("Daha fazla özellik ekleyin")
    if len(content.faq) < 3:
        score -= 10
        feedback.append("Daha fazla SSS ekleyin")
    if len(content.keywords) < 4:
        score -= 10
        feedback.append("Daha fazla anahtar kelime ekleyin")

    if score >= 90:
        feedback.append("Mükemmel içerik kalitesi!")
    elif score >= 70:
        feedback.append("İyi içerik kalitesi")
    else:
        feedback.append("İçerik iyileştirme gerekiyor")

    return ContentQuality(score=score, feedback=feedback)


def export_json(content: GeneratedContent) -> str:
    return json.dumps(content.model_dump(), ensure_ascii=False, indent=2)


class ContentPreviewRenderer:
    def __init__(self, templates_path: Optional[Path] = None):
        path = templates_path or Path(__file__).resolve().parent.parent / "templates" / "content"
        self._environment = Environment(
            loader=FileSystemLoader(path),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, content: GeneratedContent) -> str:
        return self._environment.get_template("preview.html").render(content=content)


def render_preview(content: GeneratedContent) -> str:
    return ContentPreviewRenderer().render(content)
