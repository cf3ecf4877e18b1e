from datetime import datetime

from ecosystem_services import estimate_tree


def create_tree(tree_id, species, dbh, height, condition, proximity_to_building,
                notes, photo_seed, latitude, longitude, date):
    carbon, services = estimate_tree(dbh, height, condition, proximity_to_building)
    inventory_date = datetime.fromisoformat(date.replace("Z", "+00:00"))
    return {
        "id": tree_id,
        "species": species,
        "dbh": dbh,
        "height": height,
        "condition": condition,
        "proximity_to_building": proximity_to_building,
        "notes": notes,
        "photo": f"https://picsum.photos/seed/{photo_seed}/400/300",
        "latitude": latitude,
        "longitude": longitude,
        "inventory_date": inventory_date.isoformat(),
        "carbon": carbon,
        "ecosystem_services": services,
    }


def initial_trees():
    """Built-in inventory shown on first run or when saved data is unusable."""
    return [
        create_tree(
            1, "Teak (Jati)", 60, 25, "Healthy", "Near",
            "Majestic old teak in the main park, gives excellent shade.",
            "oak", 34.0522, -118.2437, "2023-10-26T10:00:00Z",
        ),
        create_tree(
            2, "Pine (Pinus)", 45, 30, "Healthy", "Far",
            "Tall pine near the river.",
            "pine", 34.055, -118.245, "2023-10-26T11:30:00Z",
        ),
        create_tree(
            3, "Maple (Mapel)", 50, 22, "Damaged", "Near",
            "Branch broken in a recent storm. Shades the nearby bench.",
            "maple", 34.051, -118.24, "2023-10-27T09:00:00Z",
        ),
    ]
