"""
Analytics Service for rating statistics, trends and dashboards.

All statistics are computed on read with grouped queries. Day buckets use
DATE(created_at), which SQLite and PostgreSQL both support.
"""

import logging
import math
from typing import Dict, Any, List, Optional
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from sqlalchemy import func, case, desc, select

from store_ratings.config import settings
from store_ratings.models.rating import Rating
from store_ratings.models.store import Store
from store_ratings.models.user import User, Role
from store_ratings.services.store_service import store_service, summarize

logger = logging.getLogger(__name__)

POSITIVE_THRESHOLD = 4
NEGATIVE_THRESHOLD = 2
DEFAULT_USER_AVERAGE = 3.5
RECENT_ACTIVITY_DAYS = 7
GROWTH_WINDOW_DAYS = 30
ADDRESS_PREFIX_LENGTH = 50

POSITIVE_COUNT = func.count(case((Rating.rating >= POSITIVE_THRESHOLD, 1)))
NEGATIVE_COUNT = func.count(case((Rating.rating <= NEGATIVE_THRESHOLD, 1)))
FIVE_STAR_COUNT = func.count(case((Rating.rating == 5, 1)))
AVERAGE = func.coalesce(func.avg(Rating.rating), 0)


def _since(days: int) -> datetime:
    return datetime.utcnow() - timedelta(days=days)


def _float(value: Any) -> float:
    return float(value) if value is not None else 0.0


def _int(value: Any) -> int:
    return int(value) if value is not None else 0


def _day_key(value: Any) -> str:
    # SQLite returns 'YYYY-MM-DD', PostgreSQL a date
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _health(count: int, good: int, warning: int) -> str:
    if count > good:
        return "good"
    if count > warning:
        return "warning"
    return "critical"


def rating_style(total: int, positive: int, negative: int) -> str:
    """Classify how a user tends to rate."""
    if total == 0:
        return "new"
    if positive / total >= 0.7:
        return "generous"
    if negative / total >= 0.3:
        return "critical"
    return "balanced"


def rating_confidence(total: int) -> str:
    if total >= 10:
        return "high"
    if total >= 5:
        return "medium"
    return "low"


def customer_type(frequency: int) -> str:
    if frequency >= 3:
        return "loyal"
    if frequency >= 2:
        return "regular"
    return "occasional"


class AnalyticsService:
    # --- shared building blocks ---

    def rating_distribution(self, db: Session, *criteria) -> Dict[int, int]:
        """Count of ratings per star value, zero-filled for 1..5."""
        rows = (
            db.query(Rating.rating, func.count(Rating.id))
            .filter(*criteria)
            .group_by(Rating.rating)
            .all()
        )
        distribution = {value: 0 for value in range(1, 6)}
        for value, count in rows:
            distribution[int(value)] = int(count)
        return distribution

    def daily_trend(self, db: Session, days: int, *criteria) -> List[Dict[str, Any]]:
        """Average rating and count per day over the last N days."""
        day = func.date(Rating.created_at)
        results = (
            db.query(
                day.label("date"),
                func.avg(Rating.rating).label("avg_rating"),
                func.count(Rating.id).label("daily_ratings"),
            )
            .filter(Rating.created_at >= _since(days), *criteria)
            .group_by(day)
            .order_by(day)
            .all()
        )
        return [
            {"date": _day_key(d), "avg_rating": _float(avg), "daily_ratings": int(count)}
            for d, avg, count in results
        ]

    def _rating_summary(self, db: Session, *criteria) -> Dict[str, Any]:
        total, average, positive, negative, lowest, highest = (
            db.query(
                func.count(Rating.id),
                AVERAGE,
                POSITIVE_COUNT,
                NEGATIVE_COUNT,
                func.min(Rating.rating),
                func.max(Rating.rating),
            )
            .filter(*criteria)
            .one()
        )
        return {
            "total_ratings": _int(total),
            "average_rating": _float(average),
            "positive_ratings": _int(positive),
            "negative_ratings": _int(negative),
            "rating_range": {"min": _int(lowest), "max": _int(highest)},
        }

    # --- system administrator ---

    def admin_dashboard(self, db: Session) -> Dict[str, Any]:
        """Global counts, growth, distribution, top stores and recent activity."""
        total_users = db.query(func.count(User.id)).scalar() or 0
        total_stores = db.query(func.count(Store.id)).scalar() or 0
        total_ratings = db.query(func.count(Rating.id)).scalar() or 0

        growth_start = _since(GROWTH_WINDOW_DAYS)
        user_growth = (
            db.query(func.count(User.id)).filter(User.created_at >= growth_start).scalar() or 0
        )
        store_growth = (
            db.query(func.count(Store.id)).filter(Store.created_at >= growth_start).scalar() or 0
        )

        top_rows = (
            store_service.aggregate_query(db)
            .having(func.count(Rating.id) > 0)
            .order_by(desc("average_rating"), desc("total_ratings"), Store.id)
            .limit(5)
            .all()
        )

        return {
            "statistics": {
                "total_users": total_users,
                "total_stores": total_stores,
                "total_ratings": total_ratings,
                "user_growth": user_growth,
                "store_growth": store_growth,
            },
            "analytics": {
                "rating_distribution": self.rating_distribution(db),
                "top_stores": [summarize(*row) for row in top_rows],
                "system_health": {
                    "user_health": _health(total_users, 100, 50),
                    "store_health": _health(total_stores, 20, 10),
                    "rating_health": _health(total_ratings, 200, 100),
                },
            },
            "recent_activity": self.recent_activity(db),
        }

    def recent_activity(self, db: Session, limit: int = 10) -> List[Dict[str, Any]]:
        """Registrations, store creations and ratings of the last week, newest first."""
        since = _since(RECENT_ACTIVITY_DAYS)
        events: List[Dict[str, Any]] = []

        for name, created_at in (
            db.query(User.name, User.created_at)
            .filter(User.created_at >= since)
            .order_by(User.created_at.desc())
            .limit(limit)
        ):
            events.append({"type": "user_registered", "description": name, "timestamp": created_at})

        for name, created_at in (
            db.query(Store.name, Store.created_at)
            .filter(Store.created_at >= since)
            .order_by(Store.created_at.desc())
            .limit(limit)
        ):
            events.append({"type": "store_created", "description": name, "timestamp": created_at})

        for value, store_name, created_at in (
            db.query(Rating.rating, Store.name, Rating.created_at)
            .join(Store, Rating.store_id == Store.id)
            .filter(Rating.created_at >= since)
            .order_by(Rating.created_at.desc())
            .limit(limit)
        ):
            events.append(
                {
                    "type": "rating_submitted",
                    "description": f"Rating {value} for store {store_name}",
                    "timestamp": created_at,
                }
            )

        events.sort(key=lambda e: e["timestamp"], reverse=True)
        return events[:limit]

    def admin_analytics(self, db: Session, days: int = 30) -> Dict[str, Any]:
        """Rating trends, engagement per role, store performance and address spread."""
        engagement_rows = (
            db.query(
                User.role,
                func.count(func.distinct(User.id)),
                func.count(func.distinct(Rating.id)),
                func.avg(Rating.rating),
            )
            .outerjoin(Rating, Rating.user_id == User.id)
            .group_by(User.role)
            .all()
        )
        engagement = {
            role.value: {"role": role.value, "total_users": 0, "total_ratings": 0, "avg_rating": None}
            for role in Role
        }
        for role, users, ratings, avg in engagement_rows:
            engagement[role.value] = {
                "role": role.value,
                "total_users": int(users),
                "total_ratings": int(ratings),
                "avg_rating": float(avg) if avg is not None else None,
            }

        total = func.count(Rating.id)
        performance_rows = (
            db.query(
                Store.id,
                Store.name,
                Store.address,
                total,
                func.avg(Rating.rating),
                func.min(Rating.rating),
                func.max(Rating.rating),
                POSITIVE_COUNT,
                NEGATIVE_COUNT,
            )
            .outerjoin(Rating, Rating.store_id == Store.id)
            .group_by(Store.id)
            # Unrated stores last
            .order_by(case((total == 0, 1), else_=0), func.avg(Rating.rating).desc(), Store.id)
            .all()
        )
        store_performance = [
            {
                "id": store_id,
                "name": name,
                "address": address,
                "total_ratings": int(count),
                "avg_rating": float(avg) if avg is not None else None,
                "min_rating": lowest,
                "max_rating": highest,
                "positive_ratings": int(positive),
                "negative_ratings": int(negative),
            }
            for store_id, name, address, count, avg, lowest, highest, positive, negative in performance_rows
        ]

        prefix = func.substr(Store.address, 1, ADDRESS_PREFIX_LENGTH)
        store_count = func.count(func.distinct(Store.id))
        geo_rows = (
            db.query(prefix, store_count, func.avg(Rating.rating))
            .outerjoin(Rating, Rating.store_id == Store.id)
            .group_by(prefix)
            .having(store_count > 1)
            .order_by(store_count.desc())
            .limit(10)
            .all()
        )

        return {
            "period": days,
            "rating_trends": self.daily_trend(db, days),
            "user_engagement": list(engagement.values()),
            "store_performance": store_performance,
            "geo_distribution": [
                {
                    "location": location,
                    "store_count": int(count),
                    "avg_rating": float(avg) if avg is not None else None,
                }
                for location, count, avg in geo_rows
            ],
        }

    # --- store owner ---

    def owner_dashboard(self, db: Session, owner: User, days: Optional[int] = None) -> Dict[str, Any]:
        """Statistics, trend, recent ratings and customers of the owner's store."""
        days = days or settings.TREND_WINDOW_DAYS
        store = store_service.get_owned_store(db, owner)
        of_store = Rating.store_id == store.id

        summary = self._rating_summary(db, of_store)
        unique_customers, five_star = (
            db.query(func.count(func.distinct(Rating.user_id)), FIVE_STAR_COUNT)
            .filter(of_store)
            .one()
        )
        statistics = dict(
            summary,
            unique_customers=_int(unique_customers),
            five_star_ratings=_int(five_star),
        )

        trends = self.daily_trend(db, days, of_store)

        recent = (
            db.query(Rating.rating, Rating.comment, Rating.created_at, User.name, User.email)
            .join(User, Rating.user_id == User.id)
            .filter(of_store)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(15)
            .all()
        )

        customer_total = func.count(Rating.id)
        customer_avg = func.avg(Rating.rating)
        customers = (
            db.query(User.name, User.email, customer_total, customer_avg, func.max(Rating.created_at))
            .join(User, Rating.user_id == User.id)
            .filter(of_store)
            .group_by(User.id, User.name, User.email)
            .order_by(customer_total.desc(), customer_avg.desc())
            .limit(10)
            .all()
        )

        total = statistics["total_ratings"]
        growth = 0.0
        if len(trends) > 1:
            growth = round(trends[-1]["avg_rating"] - trends[0]["avg_rating"], 2)

        return {
            "store": summarize(
                store,
                statistics["average_rating"],
                total,
                unique_customers=statistics["unique_customers"],
            ),
            "statistics": statistics,
            "trends": trends,
            "recent_ratings": [
                {
                    "rating": rating,
                    "comment": comment,
                    "created_at": created_at,
                    "user_name": name,
                    "user_email": email,
                }
                for rating, comment, created_at, name, email in recent
            ],
            "rating_distribution": self.rating_distribution(db, of_store),
            "customer_insights": [
                {
                    "customer_name": name,
                    "customer_email": email,
                    "total_ratings": int(count),
                    "avg_rating": _float(avg),
                    "last_rating_date": last,
                }
                for name, email, count, avg, last in customers
            ],
            "performance_metrics": {
                "rating_score": round(statistics["average_rating"], 1),
                "customer_satisfaction": (
                    round(statistics["positive_ratings"] / total * 100) if total else 0
                ),
                "rating_confidence": rating_confidence(total),
                "growth_trend": growth,
            },
        }

    def owner_analytics(self, db: Session, owner: User, days: int = 30) -> Dict[str, Any]:
        """Daily breakdown, customer behaviour, sentiment and comparison with all stores."""
        store = store_service.get_owned_store(db, owner)
        of_store = Rating.store_id == store.id

        day = func.date(Rating.created_at)
        daily_rows = (
            db.query(
                day,
                func.avg(Rating.rating),
                func.count(Rating.id),
                POSITIVE_COUNT,
                NEGATIVE_COUNT,
                func.avg(Rating.rating * Rating.rating),
            )
            .filter(of_store, Rating.created_at >= _since(days))
            .group_by(day)
            .order_by(day)
            .all()
        )
        rating_analytics = []
        for d, avg, count, positive, negative, mean_square in daily_rows:
            avg = _float(avg)
            variance = max(_float(mean_square) - avg * avg, 0.0)
            rating_analytics.append(
                {
                    "date": _day_key(d),
                    "avg_rating": avg,
                    "total_ratings": int(count),
                    "positive_ratings": int(positive),
                    "negative_ratings": int(negative),
                    "rating_stddev": math.sqrt(variance),
                }
            )

        frequency = func.count(Rating.id)
        customer_avg = func.avg(Rating.rating)
        behaviour_rows = (
            db.query(
                User.id,
                User.name,
                frequency,
                customer_avg,
                func.min(Rating.created_at),
                func.max(Rating.created_at),
            )
            .join(User, Rating.user_id == User.id)
            .filter(of_store)
            .group_by(User.id, User.name)
            .order_by(frequency.desc(), customer_avg.desc())
            .all()
        )

        distribution = self.rating_distribution(db, of_store)
        total = sum(distribution.values())
        sentiment_counts = {
            "positive": sum(c for v, c in distribution.items() if v >= POSITIVE_THRESHOLD),
            "neutral": distribution[3],
            "negative": sum(c for v, c in distribution.items() if v <= NEGATIVE_THRESHOLD),
        }
        sentiment = [
            {"sentiment": label, "count": count, "percentage": round(count * 100.0 / total, 2)}
            for label, count in sorted(sentiment_counts.items(), key=lambda item: -item[1])
            if count > 0
        ]

        overall_avg, overall_total = db.query(func.avg(Rating.rating), func.count(Rating.id)).one()
        own = store_service.rating_aggregate(db, store.id)

        return {
            "store": {"id": store.id, "name": store.name},
            "period": days,
            "rating_analytics": rating_analytics,
            "customer_behavior": [
                {
                    "id": user_id,
                    "customer_name": name,
                    "visit_frequency": int(count),
                    "avg_rating": _float(avg),
                    "first_visit": first,
                    "last_visit": last,
                    "customer_type": customer_type(int(count)),
                }
                for user_id, name, count, avg, first, last in behaviour_rows
            ],
            "sentiment_analysis": sentiment,
            "competitive_insights": [
                {
                    "category": "overall",
                    "avg_rating": _float(overall_avg),
                    "total_ratings": _int(overall_total),
                },
                {
                    "category": "your_store",
                    "avg_rating": own["average_rating"],
                    "total_ratings": own["total_ratings"],
                },
            ],
        }

    # --- rating users ---

    def user_insights(self, db: Session, user: User, days: Optional[int] = None) -> Dict[str, Any]:
        """How the user rates, their recent trend and favourite stores."""
        days = days or settings.TREND_WINDOW_DAYS
        by_user = Rating.user_id == user.id

        summary = self._rating_summary(db, by_user)
        stores_rated = (
            db.query(func.count(func.distinct(Rating.store_id))).filter(by_user).scalar() or 0
        )
        insights = dict(
            summary,
            stores_rated=int(stores_rated),
            rating_style=rating_style(
                summary["total_ratings"], summary["positive_ratings"], summary["negative_ratings"]
            ),
        )

        favourites = (
            db.query(Store.id, Store.name, Store.address, Rating.rating, Rating.created_at)
            .join(Store, Rating.store_id == Store.id)
            .filter(by_user, Rating.rating >= POSITIVE_THRESHOLD)
            .order_by(Rating.rating.desc(), Rating.created_at.desc())
            .limit(5)
            .all()
        )

        return {
            "insights": insights,
            "trends": self.daily_trend(db, days, by_user),
            "favorite_stores": [
                {"id": sid, "name": name, "address": address, "rating": rating, "created_at": created}
                for sid, name, address, rating, created in favourites
            ],
            "rating_distribution": self.rating_distribution(db, by_user),
        }

    def user_recommendations(self, db: Session, user: User, limit: int = 10) -> Dict[str, Any]:
        """
        Suggest stores the user has not rated yet.

        Stores whose average is closest to the user's own average come first;
        trending stores are unrated stores that received ratings this week.
        """
        user_avg, user_total = (
            db.query(func.avg(Rating.rating), func.count(Rating.id))
            .filter(Rating.user_id == user.id)
            .one()
        )
        preference = float(user_avg) if user_avg is not None else DEFAULT_USER_AVERAGE

        rated = select(Rating.store_id).where(Rating.user_id == user.id)
        similarity = func.abs(AVERAGE - preference)
        total = func.count(Rating.id)

        recommended = (
            db.query(Store, AVERAGE, total, similarity)
            .outerjoin(Rating, Rating.store_id == Store.id)
            .filter(Store.id.not_in(rated))
            .group_by(Store.id)
            .order_by(similarity.asc(), total.desc(), Store.id)
            .limit(limit)
            .all()
        )

        recent = func.count(case((Rating.created_at >= _since(RECENT_ACTIVITY_DAYS), 1)))
        trending = (
            db.query(Store, AVERAGE, total, recent)
            .outerjoin(Rating, Rating.store_id == Store.id)
            .filter(Store.id.not_in(rated))
            .group_by(Store.id)
            .having(recent > 0)
            .order_by(recent.desc(), AVERAGE.desc(), Store.id)
            .limit(5)
            .all()
        )

        return {
            "recommendations": [
                summarize(store, avg, count, rating_similarity=_float(sim))
                for store, avg, count, sim in recommended
            ],
            "trending_stores": [
                summarize(store, avg, count, recent_ratings=int(recent_count))
                for store, avg, count, recent_count in trending
            ],
            "user_preferences": {
                "average_rating": preference,
                "total_ratings": _int(user_total),
            },
        }

    def user_stats(self, db: Session, user: User) -> Dict[str, Any]:
        """Member info, own rating stats, store stats for owners and latest activity."""
        total, average, lowest, highest = (
            db.query(func.count(Rating.id), AVERAGE, func.min(Rating.rating), func.max(Rating.rating))
            .filter(Rating.user_id == user.id)
            .one()
        )

        store_stats = None
        if user.role == Role.STORE_OWNER:
            row = (
                store_service.aggregate_query(db)
                .filter(Store.owner_id == user.id)
                .order_by(Store.id)
                .first()
            )
            if row:
                store, store_avg, store_total = row
                store_stats = {
                    "store_name": store.name,
                    "average_rating": _float(store_avg),
                    "total_ratings": _int(store_total),
                }

        recent = (
            db.query(Rating.created_at, Rating.rating, Store.name)
            .join(Store, Rating.store_id == Store.id)
            .filter(Rating.user_id == user.id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(5)
            .all()
        )

        return {
            "user": {"name": user.name, "role": user.role.value, "member_since": user.created_at},
            "rating_stats": {
                "total_ratings": _int(total),
                "average_rating": _float(average),
                "min_rating": lowest,
                "max_rating": highest,
            },
            "store_stats": store_stats,
            "rating_distribution": self.rating_distribution(db, Rating.user_id == user.id),
            "recent_activity": [
                {"type": "rating", "created_at": created, "rating": rating, "store_name": name}
                for created, rating, name in recent
            ],
        }


analytics_service = AnalyticsService()
