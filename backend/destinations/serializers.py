from rest_framework import serializers

from .models import Destination


class DestinationSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Destination
        fields = ["id", "name", "slug", "country", "region", "primary_image"]


class DestinationSerializer(serializers.ModelSerializer):
    rating = serializers.SerializerMethodField()

    class Meta:
        model = Destination
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "short_description",
            "country",
            "region",
            "city",
            "coordinates",
            "attractions",
            "best_time_to_visit",
            "climate",
            "images",
            "primary_image",
            "average_cost_per_day",
            "visa_requirements",
            "travel_tips",
            "languages",
            "currency_info",
            "timezone",
            "popularity",
            "rating",
            "tags",
            "is_featured",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "slug",
            "primary_image",
            "popularity",
            "rating",
            "created_at",
            "updated_at",
        ]

    def get_rating(self, obj) -> dict:
        return {"average": float(obj.rating_average), "count": obj.rating_count}

    def validate_images(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Images must be a list.")
        for image in value:
            if not isinstance(image, dict) or not image.get("url"):
                raise serializers.ValidationError("Each image needs a url.")
        return value

    def validate_tags(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Tags must be a list.")
        return [str(tag).strip().lower() for tag in value if str(tag).strip()]
