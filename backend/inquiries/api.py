from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from core.pagination import paginated_response
from core.responses import created_response, success_response

from .models import Inquiry
from .serializers import InquirySerializer, InquiryUpdateSerializer


class InquiryListCreateView(APIView):
    """Public contact form; staff read the queue."""

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAdminRole()]

    def post(self, request, *args, **kwargs):
        serializer = InquirySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inquiry = serializer.save()
        return created_response(
            {"inquiry": InquirySerializer(inquiry).data},
            "Thank you for your inquiry. We will get back to you soon.",
        )

    def get(self, request, *args, **kwargs):
        queryset = Inquiry.objects.all()
        status_filter = request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return paginated_response(
            request,
            queryset.order_by("-created_at"),
            InquirySerializer,
            message="Inquiries retrieved successfully.",
            view=self,
        )


class InquiryDetailView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, inquiry_id, *args, **kwargs):
        inquiry = get_object_or_404(Inquiry, pk=inquiry_id)
        return success_response({"inquiry": InquirySerializer(inquiry).data}, "Inquiry retrieved successfully.")

    def patch(self, request, inquiry_id, *args, **kwargs):
        inquiry = get_object_or_404(Inquiry, pk=inquiry_id)
        serializer = InquiryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        new_status = data.get("status")
        if new_status and inquiry.status == Inquiry.NEW and new_status != Inquiry.NEW:
            inquiry.responded_at = timezone.now()
            inquiry.responded_by = request.user
        if new_status:
            inquiry.status = new_status
        if "notes" in data:
            inquiry.notes = data["notes"]
        inquiry.save()
        return success_response({"inquiry": InquirySerializer(inquiry).data}, "Inquiry updated successfully.")

    def delete(self, request, inquiry_id, *args, **kwargs):
        inquiry = get_object_or_404(Inquiry, pk=inquiry_id)
        inquiry.delete()
        return success_response(None, "Inquiry deleted successfully.")
