from datetime import datetime, timezone
from sqlalchemy.orm import Session

from app.models.profile import Profile
from app.models.business import Business
from app.models.review import Review, REVIEW_SOURCE_USER, REVIEW_SOURCE_YELP
from app.models.pin import UserPin

SEED_PROFILE_1 = "11111111-1111-1111-1111-111111111111"
SEED_PROFILE_2 = "22222222-2222-2222-2222-222222222222"
SEED_BUSINESS_1 = "cafe-dos-mundos-mcallen"
SEED_BUSINESS_2 = "stellas-coffee-brownsville"


def seed_db(db: Session) -> None:
    """Seed the database with sample data."""

    # Clear existing data (optional - comment out if you want to preserve data)
    db.query(UserPin).delete()
    db.query(Review).delete()
    db.query(Business).delete()
    db.query(Profile).delete()
    db.commit()

    # Create Profiles (id is the Supabase auth user id)
    profile1 = Profile(
        id=SEED_PROFILE_1,
        email="alice@example.com",
        full_name="Alice Garza",
    )
    profile2 = Profile(
        id=SEED_PROFILE_2,
        email="bob@example.com",
        full_name="Bob Treviño",
    )
    db.add(profile1)
    db.add(profile2)
    db.commit()

    # Create Businesses (ids are Yelp business ids)
    business1 = Business(
        id=SEED_BUSINESS_1,
        name="Café Dos Mundos",
        image_url="https://s3-media.fl.yelpcdn.com/bphoto/dos-mundos/o.jpg",
        yelp_url="https://www.yelp.com/biz/cafe-dos-mundos-mcallen",
        price="$$",
        rating=4.6,
        review_count=212,
        categories=[
            {"alias": "coffee", "title": "Coffee & Tea"},
            {"alias": "bakeries", "title": "Bakeries"},
        ],
        latitude=26.2034,
        longitude=-98.2300,
        address_line1="1200 N Main St",
        city="McAllen",
        state="TX",
        zip_code="78501",
        country="US",
        display_address="1200 N Main St, McAllen, TX 78501",
        phone="+19565550101",
        display_phone="(956) 555-0101",
        photos=[
            "https://s3-media.fl.yelpcdn.com/bphoto/dos-mundos/o.jpg",
            "https://s3-media.fl.yelpcdn.com/bphoto/dos-mundos-2/o.jpg",
        ],
    )
    business2 = Business(
        id=SEED_BUSINESS_2,
        name="Stella's Coffee",
        image_url="https://s3-media.fl.yelpcdn.com/bphoto/stellas/o.jpg",
        yelp_url="https://www.yelp.com/biz/stellas-coffee-brownsville",
        price="$",
        rating=4.2,
        review_count=87,
        categories=[{"alias": "cafes", "title": "Cafes"}],
        latitude=25.9017,
        longitude=-97.4975,
        address_line1="845 E Elizabeth St",
        city="Brownsville",
        state="TX",
        zip_code="78520",
        country="US",
        display_address="845 E Elizabeth St, Brownsville, TX 78520",
        phone="+19565550145",
        display_phone="(956) 555-0145",
        photos=None,
    )
    db.add(business1)
    db.add(business2)
    db.commit()

    # Create Reviews
    review1 = Review(
        business_id=SEED_BUSINESS_1,
        user_id=SEED_PROFILE_1,
        source=REVIEW_SOURCE_USER,
        rating=5,
        title="Best cortado in the Valley",
        content="Great cortado, friendly baristas and plenty of tables to work at.",
        helpful_count=3,
    )
    review2 = Review(
        business_id=SEED_BUSINESS_1,
        source=REVIEW_SOURCE_YELP,
        rating=4,
        content="Lovely spot downtown, the pan dulce pairs perfectly with their coffee...",
        yelp_review_id="yelp-review-dos-mundos-1",
        yelp_user_name="Maria L.",
        yelp_url="https://www.yelp.com/biz/cafe-dos-mundos-mcallen?hrid=1",
        yelp_fetched_at=datetime.now(timezone.utc),
    )
    db.add(review1)
    db.add(review2)

    # Create Pins
    pin1 = UserPin(
        user_id=SEED_PROFILE_1,
        business_id=SEED_BUSINESS_2,
        status="want_to_try",
        user_notes="Try the horchata latte",
    )
    pin2 = UserPin(
        user_id=SEED_PROFILE_2,
        business_id=SEED_BUSINESS_1,
        status="favorite",
    )
    db.add(pin1)
    db.add(pin2)
    db.commit()

    print("Database seeded successfully!")
    print("Created: 2 profiles, 2 businesses, 2 reviews, 2 pins")
