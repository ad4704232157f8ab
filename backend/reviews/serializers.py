from rest_framework import serializers

from trips.models import Trip

from .models import RATING_CATEGORIES, Review


class ReviewAuthorSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    full_name = serializers.CharField(read_only=True)
    profile_picture = serializers.CharField(read_only=True)


class ReviewTripSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    slug = serializers.CharField(read_only=True)
    primary_image = serializers.CharField(read_only=True)


class RatingSerializer(serializers.Serializer):
    overall = serializers.IntegerField(min_value=1, max_value=5)
    categories = serializers.DictField(
        child=serializers.IntegerField(min_value=1, max_value=5),
        required=False,
        default=dict,
    )

    def validate_categories(self, value):
        unknown = sorted(set(value) - set(RATING_CATEGORIES))
        if unknown:
            raise serializers.ValidationError(f"Unknown rating categories: {', '.join(unknown)}.")
        return value


class ReviewSerializer(serializers.ModelSerializer):
    """Read representation; ``rating`` nests the overall and category scores."""

    user = ReviewAuthorSerializer(read_only=True)
    trip = ReviewTripSerializer(read_only=True)
    rating = serializers.SerializerMethodField()
    response = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            "id",
            "user",
            "trip",
            "rating",
            "title",
            "content",
            "pros",
            "cons",
            "images",
            "travel_date",
            "traveled_with",
            "would_recommend",
            "helpful_votes",
            "is_verified_purchase",
            "status",
            "response",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_rating(self, obj) -> dict:
        return {"overall": obj.rating_overall, "categories": obj.rating_categories}

    def get_response(self, obj):
        if not obj.response_content:
            return None
        return {
            "content": obj.response_content,
            "responded_by": obj.responded_by_id,
            "responded_at": obj.responded_at,
        }


class AdminReviewSerializer(ReviewSerializer):
    class Meta(ReviewSerializer.Meta):
        fields = ReviewSerializer.Meta.fields + ["moderation_notes", "booking"]
        read_only_fields = fields


class ReviewWriteSerializer(serializers.Serializer):
    trip = serializers.PrimaryKeyRelatedField(queryset=Trip.objects.exclude(status=Trip.CANCELLED))
    rating = RatingSerializer()
    title = serializers.CharField(max_length=100)
    content = serializers.CharField(min_length=20, max_length=2000)
    pros = serializers.ListField(child=serializers.CharField(max_length=200), required=False, default=list)
    cons = serializers.ListField(child=serializers.CharField(max_length=200), required=False, default=list)
    images = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    travel_date = serializers.DateField(required=False, allow_null=True)
    traveled_with = serializers.ChoiceField(choices=Review.TRAVELED_WITH, required=False, allow_blank=True)
    would_recommend = serializers.BooleanField(required=False, default=True)

    def validate_images(self, value):
        for image in value:
            if not image.get("url"):
                raise serializers.ValidationError("Each image needs a url.")
        return value


class ReviewUpdateSerializer(ReviewWriteSerializer):
    """Authors may edit the text and scores, not the trip."""

    trip = None

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("partial", True)
        super().__init__(*args, **kwargs)


class ModerateReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Review.STATUSES, required=False)
    moderation_notes = serializers.CharField(required=False, allow_blank=True)
    response = serializers.CharField(max_length=2000, required=False, allow_blank=True)
