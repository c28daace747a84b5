from django.conf import settings
from django.db import models


class Patient(models.Model):
    # provider_id 存的是 Healthie 的 provider id，provider 在外部系统里，所以没有外键
    provider_id = models.CharField(max_length=64, db_index=True)
    full_name = models.CharField(max_length=200)
    date_of_birth = models.DateField()
    mobile = models.CharField(max_length=32)
    email = models.CharField(max_length=254, blank=True, null=True)
    isi_score = models.PositiveSmallIntegerField(blank=True, null=True)
    tx_cbti = models.BooleanField(default=False)
    tx_cpap_comisa = models.BooleanField(default=False)
    tx_sleep_eeg = models.BooleanField(default=False)
    tx_zepbound_osa = models.BooleanField(default=False)
    tx_natural_products = models.BooleanField(default=False)
    tx_insomnia_meds_mgmt = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patients'


class AuthorizerUser(models.Model):
    """
    Authorizer 自己的 users 表，只读。

    表结构归 Authorizer 所有，这里只声明用得到的列。
    app_data 在库里是 JSON 文本，读出来以后再解析。
    """

    id = models.CharField(primary_key=True, max_length=64)
    email = models.CharField(max_length=254, blank=True, null=True)
    given_name = models.CharField(max_length=200, blank=True, null=True)
    family_name = models.CharField(max_length=200, blank=True, null=True)
    nickname = models.CharField(max_length=200, blank=True, null=True)
    phone_number = models.CharField(max_length=32, blank=True, null=True)
    app_data = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'authorizer_users'
        managed = getattr(settings, 'AUTHORIZER_USERS_MANAGED', False)
