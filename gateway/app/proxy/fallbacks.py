"""
Fixed datasets served by listing routes whose policy is SERVE_FALLBACK.

Payloads are built fresh on every call so a caller mutating one response
never affects the next.
"""

from typing import Any, Dict


def mock_users() -> Dict[str, Any]:
    return {
        "users": [
            {
                "id": "1",
                "name": "John Doe",
                "email": "john@example.com",
                "phone": "+254712345678",
                "role": "customer",
                "status": "active",
                "joinDate": "2024-01-15",
                "totalBookings": 12,
            },
            {
                "id": "2",
                "name": "Sarah Wilson",
                "email": "sarah@example.com",
                "phone": "+254723456789",
                "role": "provider",
                "status": "active",
                "joinDate": "2024-02-10",
                "totalBookings": 45,
            },
            {
                "id": "3",
                "name": "Mike Johnson",
                "email": "mike@example.com",
                "phone": "+254734567890",
                "role": "customer",
                "status": "suspended",
                "joinDate": "2024-03-05",
                "totalBookings": 3,
            },
        ],
        "pagination": {
            "currentPage": 1,
            "totalPages": 1,
            "totalUsers": 3,
            "hasNext": False,
            "hasPrev": False,
        },
    }


def _service(
    service_id: str,
    name: str,
    description: str,
    category: str,
    base_price: int,
    active: bool,
    bookings: int,
    rating: float,
    reviews: int,
    created_at: str,
) -> Dict[str, Any]:
    return {
        "_id": service_id,
        "name": name,
        "description": description,
        "category": category,
        "basePrice": base_price,
        "currency": "KES",
        "isActive": active,
        "bookingCount": bookings,
        "rating": {"average": rating, "count": reviews},
        "createdAt": created_at,
    }


def mock_services() -> Dict[str, Any]:
    services = [
        _service("1", "Plumbing Services", "Professional plumbing installation and repair",
                 "plumbing", 2500, True, 45, 4.8, 23, "2025-01-15T10:00:00Z"),
        _service("2", "Electrical Installation", "Safe and reliable electrical work",
                 "electrical", 3000, True, 32, 4.7, 18, "2025-01-16T10:00:00Z"),
        _service("3", "House Cleaning", "Deep cleaning for homes and offices",
                 "cleaning", 1500, True, 67, 4.9, 41, "2025-01-17T10:00:00Z"),
        _service("4", "Carpentry Work", "Custom furniture and woodwork",
                 "carpentry", 4000, True, 28, 4.6, 15, "2025-01-18T10:00:00Z"),
        _service("5", "Painting Services", "Interior and exterior painting",
                 "painting", 2000, False, 19, 4.5, 12, "2025-01-19T10:00:00Z"),
        _service("6", "Garden Maintenance", "Landscaping and garden care",
                 "gardening", 1800, True, 22, 4.4, 9, "2025-01-20T10:00:00Z"),
    ]

    return {
        "services": services,
        "stats": {
            "totalServices": len(services),
            "activeServices": sum(1 for s in services if s["isActive"]),
            "averagePrice": round(sum(s["basePrice"] for s in services) / len(services)),
            "totalBookings": sum(s["bookingCount"] for s in services),
        },
        "pagination": {
            "page": 1,
            "pages": 1,
            "total": len(services),
            "limit": 10,
        },
    }
