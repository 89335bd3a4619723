from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


def _split_name(name: str) -> tuple[str, str]:
    first, _, last = (name or "").strip().partition(" ")
    return first, last.strip()


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _email_taken(email: str, exclude_pk=None) -> bool:
    queryset = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    return queryset.exists()


class UserSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "first_name", "last_name", "display_name", "phone", "role", "created_at"]
        read_only_fields = fields

    def get_name(self, obj) -> str:
        return obj.display_name or f"{obj.first_name} {obj.last_name}".strip() or obj.email


class RegisterSerializer(serializers.Serializer):
    """Sign-up payload. The role is never taken from the request."""

    name = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True, required=False)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")

    def validate_email(self, value: str) -> str:
        email = _normalize_email(value)
        if _email_taken(email):
            raise serializers.ValidationError("Email already registered.")
        return email

    def validate(self, attrs):
        confirm = attrs.pop("password_confirm", None)
        if confirm is not None and confirm != attrs["password"]:
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        name = attrs.pop("name", "").strip()
        first, last = _split_name(name)
        attrs.setdefault("first_name", first)
        attrs.setdefault("last_name", last)
        attrs["display_name"] = name or f"{attrs['first_name']} {attrs['last_name']}".strip()
        return attrs

    def create(self, validated_data):
        email = validated_data.pop("email")
        user = User.objects.create_user(
            username=email,
            email=email,
            password=validated_data.pop("password"),
            role=self.context.get("default_role") or User.ROLE_USER,
            **validated_data,
        )
        if not user.display_name:
            user.display_name = email
            user.save(update_fields=["display_name"])
        return user


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Log in with email + password; usernames mirror emails for every account."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["email"] = serializers.EmailField()

    def validate(self, attrs):
        user = User.objects.filter(email__iexact=_normalize_email(attrs.pop("email"))).first()
        attrs[self.username_field] = user.get_username() if user else ""
        data = super().validate(attrs)
        data["user"] = UserSerializer(self.user).data
        return data


class ProfileUpdateSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=120, required=False, allow_blank=True, write_only=True)

    class Meta:
        model = User
        fields = ["name", "email", "first_name", "last_name", "display_name", "phone"]

    def validate_email(self, value: str) -> str:
        email = _normalize_email(value)
        if _email_taken(email, exclude_pk=self.instance.pk):
            raise serializers.ValidationError("Email already registered.")
        return email

    def update(self, instance, validated_data):
        name = validated_data.pop("name", None)
        if name is not None:
            validated_data.setdefault("display_name", name.strip())
        if validated_data.get("email"):
            # login resolves through the username
            instance.username = validated_data["email"]
        return super().update(instance, validated_data)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True, required=False)

    def validate_current_password(self, value):
        if not self.context["request"].user.check_password(value):
            raise serializers.ValidationError("Your current password is wrong.")
        return value

    def validate(self, attrs):
        confirm = attrs.get("password_confirm")
        if confirm is not None and confirm != attrs["new_password"]:
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        if attrs["new_password"] == attrs["current_password"]:
            raise serializers.ValidationError({"new_password": "New password must differ from the current password."})
        return attrs

    def save(self, **kwargs):
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password"])
        return user
