"""Static airport transfer routes served when the database cannot be queried.

The same routes are inserted by ``lydian_travel.seed``.
"""

from decimal import Decimal
from typing import Any, Dict, List

DEFAULT_ROUTE_IMAGE = "https://images.unsplash.com/photo-1449965408869-eaa3f722e40d?w=800"
DEFAULT_VEHICLE_IMAGE = "https://images.unsplash.com/photo-1583121274602-3e2820c69888?w=400"
_VAN_IMAGE = "https://images.unsplash.com/photo-1519641471654-76ce0107ad1b?w=400"

AYT = "Antalya Havalimanı"
GZP = "Gazipaşa-Alanya Havalimanı"


def _sedan(standard: int, vip: int, features: List[str] | None = None) -> Dict[str, Any]:
    return {
        "vehicle_type": "SEDAN",
        "name": "Standart Sedan",
        "capacity": 3,
        "luggage_capacity": 2,
        "price_standard": Decimal(standard),
        "price_vip": Decimal(vip),
        "features": features or ["Klima", "Konforlu Koltuklar"],
        "image": DEFAULT_VEHICLE_IMAGE,
    }


def _vito(standard: int, vip: int, features: List[str]) -> Dict[str, Any]:
    return {
        "vehicle_type": "LUXURY_VAN",
        "name": "Mercedes Vito VIP",
        "capacity": 7,
        "luggage_capacity": 6,
        "price_standard": Decimal(standard),
        "price_vip": Decimal(vip),
        "features": features,
        "image": _VAN_IMAGE,
    }


TRANSFER_ROUTES: List[Dict[str, Any]] = [
    {
        "code": "AYT",
        "from_location": AYT,
        "to_location": "Antalya Şehir Merkezi",
        "distance": 15,
        "duration": 25,
        "region": "Antalya",
        "description": "Antalya Havalimanından şehir merkezine konforlu ve güvenli transfer hizmeti. 7/24 hizmet, profesyonel şoförler.",
        "image": DEFAULT_ROUTE_IMAGE,
        "popular": False,
        "vehicles": [
            _sedan(250, 400),
            _vito(800, 1200, ["Premium İç Mekan", "Wi-Fi", "İkramlı Bar", "Masaj Koltukları", "Meet & Greet", "Profesyonel Şoför"]),
        ],
    },
    {
        "code": "AYT",
        "from_location": AYT,
        "to_location": "Lara",
        "distance": 18,
        "duration": 30,
        "region": "Antalya",
        "description": "Antalya Havalimanından Lara bölgesindeki otellerinize direkt transfer. En popüler destinasyon.",
        "image": "https://images.unsplash.com/photo-1559827260-dc66d52bef19?w=800",
        "popular": False,
        "vehicles": [
            _sedan(280, 450),
            _vito(850, 1250, ["Lüks Deri Koltuklar", "Wi-Fi", "İkram", "Meet & Greet"]),
        ],
    },
    {
        "code": "AYT",
        "from_location": AYT,
        "to_location": "Belek",
        "distance": 35,
        "duration": 45,
        "region": "Antalya",
        "description": "Golf ve lüks oteller bölgesi Belek'e konforlu transfer hizmeti.",
        "image": "https://images.unsplash.com/photo-1602002418082-a4443e081dd1?w=800",
        "popular": False,
        "vehicles": [
            _sedan(350, 550),
            _vito(950, 1400, ["Premium İç Mekan", "Wi-Fi", "İkram", "Meet & Greet", "Uçuş Takibi"]),
        ],
    },
    {
        "code": "AYT",
        "from_location": AYT,
        "to_location": "Side",
        "distance": 65,
        "duration": 75,
        "region": "Antalya",
        "description": "Antik Side bölgesine transfer hizmeti. Tarihi ve plajlarıyla ünlü.",
        "image": "https://images.unsplash.com/photo-1605519582177-2e4ef8d28eef?w=800",
        "popular": False,
        "vehicles": [
            _sedan(450, 700),
            _vito(1200, 1700, ["Lüks İç Mekan", "Wi-Fi", "İkram", "Meet & Greet", "Profesyonel Şoför"]),
        ],
    },
    {
        "code": "AYT",
        "from_location": AYT,
        "to_location": "Alanya",
        "distance": 125,
        "duration": 120,
        "region": "Antalya-Alanya",
        "description": "Antalya Havalimanından Alanya'ya VIP ve standart transfer hizmetleri. En popüler rota!",
        "image": "https://images.unsplash.com/photo-1602002418082-a4443e081dd1?w=800",
        "popular": True,
        "vehicles": [
            _sedan(650, 1000, ["Klima", "Konforlu Koltuklar", "Bagaj Alanı"]),
            _vito(
                1500,
                2200,
                [
                    "Premium Deri Koltuklar",
                    "Wi-Fi",
                    "İkramlı Minibar",
                    "Masaj Koltukları",
                    "Tablet Eğlence Sistemi",
                    "Meet & Greet",
                    "Profesyonel Şoför",
                    "Uçuş Takibi",
                    "7/24 Destek",
                ],
            ),
            {
                "vehicle_type": "MINIBUS",
                "name": "Mercedes Sprinter",
                "capacity": 14,
                "luggage_capacity": 10,
                "price_standard": Decimal(1100),
                "price_vip": Decimal(1600),
                "features": ["Geniş İç Mekan", "Klima", "Bagaj Bölmesi"],
                "image": "https://images.unsplash.com/photo-1570125909232-eb263c188f7e?w=400",
            },
        ],
    },
    {
        "code": "GZP",
        "from_location": GZP,
        "to_location": "Alanya",
        "distance": 35,
        "duration": 40,
        "region": "Alanya",
        "description": "Gazipaşa-Alanya Havalimanından Alanya merkezine kısa mesafe transfer.",
        "image": "https://images.unsplash.com/photo-1436491865332-7a61a109cc05?w=800",
        "popular": False,
        "vehicles": [
            _sedan(300, 500),
            _vito(850, 1200, ["Lüks İç Mekan", "Wi-Fi", "İkram", "Meet & Greet"]),
        ],
    },
    {
        "code": "AYT",
        "from_location": AYT,
        "to_location": "Kemer",
        "distance": 55,
        "duration": 60,
        "region": "Antalya",
        "description": "Kemer bölgesine transfer - doğa ve plajların buluştuğu nokta.",
        "image": "https://images.unsplash.com/photo-1559827260-dc66d52bef19?w=800",
        "popular": False,
        "vehicles": [
            _sedan(400, 650),
            _vito(1100, 1600, ["Premium İç Mekan", "Wi-Fi", "İkram", "Meet & Greet"]),
        ],
    },
]
